"""
MyStar Backend
Personalized video greetings marketplace: payments, transactional email and
order orchestration on top of Supabase.
"""

__version__ = "1.0.0"
