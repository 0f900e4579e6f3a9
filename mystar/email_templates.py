"""
HTML email templates (Hebrew, right-to-left)

Built-in templates are rendered with an autoescaping Jinja2 environment.
Admin-managed templates stored in the `email_templates` table use the same
`{{key}}` placeholders and are rendered in a sandbox; placeholders without a
value are left in place.
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional

from jinja2 import DebugUndefined, Environment, TemplateError
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup, escape

SUPABASE_URL_PATTERN = re.compile(r"https://[a-z0-9]+\.supabase\.co")

DEFAULT_ESTIMATED_DELIVERY = "24-48 שעות"
DEFAULT_CONTACT_SUBJECT = "פנייה מטופס יצירת קשר"
UNSPECIFIED_REQUEST_TYPE = "לא צוין"

REQUEST_TYPE_LABELS = {
    "birthday": "יום הולדת",
    "anniversary": "יום נישואין",
    "congratulations": "ברכות",
    "motivation": "מוטיבציה",
    "other": "אחר",
}


def translate_request_type(request_type: Optional[str]) -> str:
    """Hebrew label for a request type; unknown types pass through"""
    if not request_type:
        return UNSPECIFIED_REQUEST_TYPE
    return REQUEST_TYPE_LABELS.get(request_type, request_type)


def nl2br(value: Optional[str]) -> Markup:
    return Markup("<br>").join(escape(value or "").split("\n"))


def format_price(price: Any) -> str:
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        return f"{price:.2f}"
    return "" if price is None else str(price)


_env = Environment(autoescape=True)
_env.filters["nl2br"] = nl2br
_env.filters["price"] = format_price

_sandbox = SandboxedEnvironment(autoescape=True, undefined=DebugUndefined)


# ============================================================================
# BUILT-IN TEMPLATES
# ============================================================================

_FOOTER = """
  <div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; text-align: center; color: #6b7280; font-size: 14px;">
    <p>&copy; {{ year }} MyStar - מיי סטאר. כל הזכויות שמורות.</p>
  </div>
"""

ORDER_CONFIRMATION = _env.from_string("""
<div dir="rtl" style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e5e7eb; border-radius: 8px;">
  <h1 style="color: #0284c7; text-align: center;">תודה על ההזמנה שלך!</h1>
  <div style="text-align: center; margin: 20px 0;">
    <img src="https://answerme.co.il/mystar/logo.png" alt="MyStar" style="width: 120px; height: auto;" />
  </div>
  <p style="margin-top: 20px;">שלום {{ fan_name or 'מעריץ יקר' }},</p>
  <p>תודה שהזמנת סרטון ברכה מ{{ creator_name }}!</p>
  <div style="background-color: #f0f9ff; border: 1px solid #bae6fd; border-radius: 8px; padding: 20px; margin: 20px 0;">
    <h3 style="color: #0284c7; margin-top: 0;">פרטי ההזמנה שלך:</h3>
    <p><strong>מספר הזמנה:</strong> #{{ order_id[:8] }}</p>
    <p><strong>סוג בקשה:</strong> {{ order_type }}</p>
    <p><strong>יוצר:</strong> {{ creator_name }}</p>
    <p><strong>זמן אספקה משוער:</strong> {{ estimated_delivery }}</p>
  </div>
  <p>הבקשה שלך התקבלה והועברה ליוצר. היוצר יעבוד על הסרטון בהקדם האפשרי.</p>
  <p>כאשר הסרטון יהיה מוכן, נשלח לך הודעה ותוכל לצפות בו בלוח הבקרה שלך.</p>
  <div style="margin: 30px 0; text-align: center;">
    <a href="{{ site_url }}/dashboard/fan" style="background-color: #0284c7; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">צפה בדף ההזמנה</a>
  </div>
  <p>אם יש לך שאלות כלשהן לגבי ההזמנה שלך, אל תהסס לפנות אלינו בכתובת <a href="mailto:support@mystar.co.il">support@mystar.co.il</a>.</p>
""" + _FOOTER + "</div>\n")

CREATOR_NOTIFICATION = _env.from_string("""
<div dir="rtl" style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e5e7eb; border-radius: 8px;">
  <h1 style="color: #0284c7; text-align: center;">הזמנה חדשה!</h1>
  <p style="margin-top: 20px;">שלום {{ creator_name }},</p>
  <p>התקבלה הזמנה חדשה מ{{ fan_name or 'מעריץ' }}!</p>
  <div style="background-color: #f0f9ff; border: 1px solid #bae6fd; border-radius: 8px; padding: 20px; margin: 20px 0;">
    <h3 style="color: #0284c7; margin-top: 0;">פרטי ההזמנה:</h3>
    <p><strong>מספר הזמנה:</strong> #{{ order_id[:8] }}</p>
    <p><strong>סוג בקשה:</strong> {{ order_type }}</p>
    <p><strong>מחיר:</strong> ₪{{ order_price | price }}</p>
    <p><strong>הודעה מהמעריץ:</strong></p>
    <div style="background-color: #ffffff; padding: 15px; border-radius: 5px; margin-top: 10px;">
      {{ order_message | nl2br }}
    </div>
  </div>
  <p>אנא היכנס ללוח הבקרה שלך כדי לאשר או לדחות את ההזמנה. זכור שיש לך 48 שעות לאשר או לדחות את ההזמנה.</p>
  <div style="margin: 30px 0; text-align: center;">
    <a href="{{ site_url }}/dashboard/creator/requests" style="background-color: #0284c7; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">צפה בהזמנה</a>
  </div>
  <p>אם יש לך שאלות כלשהן, אל תהסס לפנות אלינו בכתובת <a href="mailto:support@mystar.co.il">support@mystar.co.il</a>.</p>
""" + _FOOTER + "</div>\n")

CONTACT_FORM = _env.from_string("""
<div dir="rtl" style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e5e7eb; border-radius: 8px;">
  <h1 style="color: #0284c7; text-align: center;">פנייה חדשה התקבלה</h1>
  <div style="margin-top: 20px;">
    <p><strong>שם:</strong> {{ name }}</p>
    <p><strong>אימייל:</strong> {{ email }}</p>
    <p><strong>נושא:</strong> {{ subject }}</p>
    <p><strong>הודעה:</strong></p>
    <div style="background-color: #f9fafb; padding: 15px; border-radius: 5px; margin-top: 10px;">
      {{ message | nl2br }}
    </div>
  </div>
  <div style="margin-top: 30px; font-size: 14px; color: #6b7280;">
    <p>הודעה זו נשלחה מטופס יצירת הקשר באתר MyStar.</p>
    {% if ticket_id %}<p>מזהה פנייה: {{ ticket_id }}</p>{% endif %}
  </div>
</div>
""")


def render_order_confirmation(
    order_id: str,
    fan_name: Optional[str],
    creator_name: Optional[str],
    order_type: Optional[str],
    estimated_delivery: Optional[str],
    site_url: str,
) -> str:
    return ORDER_CONFIRMATION.render(
        order_id=order_id,
        fan_name=fan_name,
        creator_name=creator_name or "",
        order_type=order_type or "",
        estimated_delivery=estimated_delivery or DEFAULT_ESTIMATED_DELIVERY,
        site_url=site_url,
        year=datetime.now().year,
    )


def render_creator_notification(
    order_id: str,
    creator_name: str,
    fan_name: Optional[str],
    order_type: Optional[str],
    order_message: Optional[str],
    order_price: Any,
    site_url: str,
) -> str:
    return CREATOR_NOTIFICATION.render(
        order_id=order_id,
        creator_name=creator_name,
        fan_name=fan_name,
        order_type=translate_request_type(order_type),
        order_message=order_message,
        order_price=order_price,
        site_url=site_url,
        year=datetime.now().year,
    )


def render_contact_form(name: str, email: str, subject: str, message: str, ticket_id: Optional[str]) -> str:
    return CONTACT_FORM.render(name=name, email=email, subject=subject, message=message, ticket_id=ticket_id)


# ============================================================================
# STORED TEMPLATES
# ============================================================================

def render_stored_template(content: str, data: Dict[str, Any], site_url: str) -> str:
    """Fill `{{key}}` placeholders of a stored template and pin links to the site URL

    Raises jinja2.TemplateError when the stored content is not a valid template.
    """
    rendered = _sandbox.from_string(content).render(**data)
    return SUPABASE_URL_PATTERN.sub(site_url, rendered)


__all__ = [
    "DEFAULT_CONTACT_SUBJECT",
    "REQUEST_TYPE_LABELS",
    "TemplateError",
    "render_contact_form",
    "render_creator_notification",
    "render_order_confirmation",
    "render_stored_template",
    "translate_request_type",
]
