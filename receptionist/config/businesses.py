"""
Demo business catalog and voice selection.

Each persona key selects a BusinessContext. The catalog is read-only and shared
by every session; callers that need real tenants supply their own mapping.
"""

from typing import Dict, Optional

from receptionist.models.business import BusinessContext

DEFAULT_PERSONA = "barber"


def _week(weekday_hours, saturday, sunday):
    """Build an opening-hours mapping from (open, close) tuples; None means closed."""
    hours = {}
    days = ["monday", "tuesday", "wednesday", "thursday", "friday"]
    for day, span in zip(days, weekday_hours):
        hours[day] = {"open": span[0], "close": span[1], "isOpen": True}
    for day, span in (("saturday", saturday), ("sunday", sunday)):
        if span is None:
            hours[day] = {"open": "00:00", "close": "00:00", "isOpen": False}
        else:
            hours[day] = {"open": span[0], "close": span[1], "isOpen": True}
    return hours


DEMO_BUSINESSES: Dict[str, BusinessContext] = {
    "barber": BusinessContext(
        id="demo-barber",
        name="Raj's Premium Salon",
        type="salon",
        address="123 MG Road, Bangalore. Near Metro Station.",
        telegramChatId="123456789",
        agentPersona={
            "name": "Priya",
            "language": "hi-en",
            "tone": "friendly",
            "greeting": "Namaste! Raj Salon me aapka swagat hai. Main Priya hoon, aapki kya help kar sakti hoon?",
        },
        services=[
            {"name": "Haircut", "duration": 30, "price": 300, "description": "Professional haircut"},
            {"name": "Beard Trim", "duration": 15, "price": 150, "description": "Beard shaping"},
            {"name": "Hair Color", "duration": 60, "price": 800, "description": "Full coloring"},
            {"name": "Facial", "duration": 45, "price": 500, "description": "Deep cleansing facial"},
            {"name": "Head Massage", "duration": 20, "price": 200, "description": "Relaxing massage"},
        ],
        openingHours=_week(
            [("09:00", "20:00")] * 4 + [("09:00", "21:00")],
            saturday=("10:00", "22:00"),
            sunday=("10:00", "18:00"),
        ),
    ),
    "dentist": BusinessContext(
        id="demo-dentist",
        name="Smile Dental Clinic",
        type="clinic",
        address="45 Linking Road, Bandra West, Mumbai",
        agentPersona={
            "name": "Dr. Sharma",
            "language": "en",
            "tone": "professional",
            "greeting": "Hello! Thank you for calling Smile Dental Clinic. I am Dr. Sharma. How may I help you today?",
        },
        services=[
            {"name": "Checkup", "duration": 30, "price": 500, "description": "Dental examination"},
            {"name": "Cleaning", "duration": 45, "price": 800, "description": "Professional cleaning"},
            {"name": "Filling", "duration": 60, "price": 1500, "description": "Cavity filling"},
            {"name": "Root Canal", "duration": 90, "price": 5000, "description": "Root canal treatment"},
            {"name": "Whitening", "duration": 60, "price": 3000, "description": "Teeth whitening"},
        ],
        openingHours=_week(
            [("09:00", "18:00")] * 5,
            saturday=("10:00", "14:00"),
            sunday=None,
        ),
    ),
    "gym": BusinessContext(
        id="demo-gym",
        name="FitZone Gym",
        type="gym",
        address="2nd Floor, Sector 18 Market, Noida",
        agentPersona={
            "name": "Coach Rahul",
            "language": "hi-en",
            "tone": "energetic",
            "greeting": "Hey! FitZone Gym mein welcome! Main Coach Rahul. Ready ho fitness journey start karne ke liye?",
        },
        services=[
            {"name": "Personal Training", "duration": 60, "price": 1000, "description": "One-on-one training"},
            {"name": "Group Class", "duration": 45, "price": 300, "description": "Group fitness"},
            {"name": "Yoga", "duration": 60, "price": 400, "description": "Guided yoga"},
            {"name": "Assessment", "duration": 30, "price": 500, "description": "Body analysis"},
            {"name": "Diet Plan", "duration": 45, "price": 800, "description": "Nutrition planning"},
        ],
        openingHours=_week(
            [("05:00", "22:00")] * 5,
            saturday=("06:00", "20:00"),
            sunday=("07:00", "18:00"),
        ),
    ),
    "spa": BusinessContext(
        id="demo-spa",
        name="Serenity Wellness Spa",
        type="spa",
        address="12 Koregaon Park, Pune",
        agentPersona={
            "name": "Maya",
            "language": "en",
            "tone": "calm",
            "greeting": "Welcome to Serenity Spa. I am Maya. How may I help you relax today?",
        },
        services=[
            {"name": "Swedish Massage", "duration": 60, "price": 2000, "description": "Full body relaxation"},
            {"name": "Deep Tissue", "duration": 75, "price": 2500, "description": "Intensive therapy"},
            {"name": "Aromatherapy", "duration": 90, "price": 3000, "description": "Essential oils"},
            {"name": "Hot Stone", "duration": 75, "price": 2800, "description": "Heated stone massage"},
            {"name": "Facial", "duration": 60, "price": 1500, "description": "Rejuvenating facial"},
        ],
        openingHours=_week(
            [("10:00", "20:00")] * 4 + [("10:00", "21:00")],
            saturday=("09:00", "21:00"),
            sunday=("10:00", "18:00"),
        ),
    ),
    "electrician": BusinessContext(
        id="demo-electrician",
        name="Quick Fix Electricals",
        type="service",
        address="Shop 7, Lajpat Nagar Central Market, New Delhi",
        agentPersona={
            "name": "Ramesh",
            "language": "hi-en",
            "tone": "helpful",
            "greeting": "Hello! Quick Fix Electricals mein aapka swagat hai. Bijli ki koi problem hai?",
        },
        services=[
            {"name": "Home Visit", "duration": 60, "price": 300, "description": "Inspection and repairs"},
            {"name": "Wiring", "duration": 120, "price": 800, "description": "Electrical wiring"},
            {"name": "Fan Installation", "duration": 45, "price": 400, "description": "Fan fitting"},
            {"name": "AC Service", "duration": 90, "price": 600, "description": "AC maintenance"},
            {"name": "Emergency", "duration": 60, "price": 500, "description": "Urgent repairs"},
        ],
        openingHours=_week(
            [("08:00", "20:00")] * 5,
            saturday=("09:00", "18:00"),
            sunday=("10:00", "14:00"),
        ),
    ),
}


def get_business(persona: Optional[str]) -> Optional[BusinessContext]:
    """Return the business for a persona key; a missing key selects the default."""
    return DEMO_BUSINESSES.get(persona or DEFAULT_PERSONA)


def find_business_by_id(business_id: str) -> Optional[BusinessContext]:
    for business in DEMO_BUSINESSES.values():
        if business.id == business_id:
            return business
    return None


def select_voice(persona: str, business: BusinessContext) -> str:
    """Pick an OpenAI Realtime voice matching the persona's character."""
    language = business.agentPersona.language
    if language in ("hi", "hi-en"):
        # Warmer voices for Hindi and Hinglish
        return "echo" if persona == "gym" else "shimmer"
    if persona == "dentist":
        return "sage"
    if persona == "spa":
        return "coral"
    if persona == "gym":
        return "ash"
    return "shimmer"
