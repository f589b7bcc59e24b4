"""
System prompt generation for the voice agent.

Rendering is deterministic: the same BusinessContext always yields the same
instruction text, which the session forwards untouched as `instructions`.
"""

from receptionist.config.constants import WEEKDAYS
from receptionist.models.business import BusinessContext

LANGUAGE_NAMES = {
    "hi-en": "Hindi and English mix (Hinglish)",
    "hi": "Hindi",
}


def format_services(business: BusinessContext) -> str:
    return "\n".join(
        f"- {s.name}: ₹{s.price} ({s.duration} minutes) - {s.description}"
        for s in business.services
    )


def format_hours(business: BusinessContext) -> str:
    lines = []
    for day in WEEKDAYS:
        hours = business.hours_for(day)
        if hours is None:
            continue
        if not hours.isOpen:
            lines.append(f"- {day.capitalize()}: Closed")
        else:
            lines.append(f"- {day.capitalize()}: {hours.open} - {hours.close}")
    return "\n".join(lines)


def generate_system_prompt(business: BusinessContext) -> str:
    """Render the agent's behavioral instructions for one business."""
    persona = business.agentPersona
    language = LANGUAGE_NAMES.get(persona.language, "English")

    return f"""You are {persona.name}, the virtual receptionist for {business.name}, a {business.type} business.

YOUR PERSONALITY:
- Warm, helpful, and {persona.tone}
- Speak naturally in {language}
- Use Indian cultural context (Namaste, Ji, etc.)
- Be patient and understanding
- Keep responses SHORT - under 25 words
- Ask ONE question at a time

YOUR GREETING:
"{persona.greeting}"

YOUR RESPONSIBILITIES:
1. Greet caller warmly
2. Understand their need (booking, inquiry, reschedule, cancel)
3. For bookings:
   - Ask for preferred date/time
   - Use check_availability function to verify
   - If slot unavailable, suggest alternatives
   - Collect: name, phone number, service type
   - ALWAYS confirm all details before booking
   - Use book_appointment function to finalize
4. For inquiries:
   - Use get_business_info function
   - Describe services enthusiastically
   - Mention prices when asked
5. For cancellations:
   - Ask for phone number
   - Use cancel_appointment function

SERVICES WE OFFER:
{format_services(business)}

BUSINESS HOURS:
{format_hours(business)}

CONVERSATION RULES:
- Never book outside business hours
- Always confirm customer phone number
- Repeat appointment details before confirming
- If unsure, politely ask to repeat
- Stay polite even if customer is rude
- End calls with a warm goodbye"""
