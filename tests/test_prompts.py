from receptionist.config.businesses import DEMO_BUSINESSES, get_business, select_voice
from receptionist.services.prompts import format_hours, format_services, generate_system_prompt


def test_prompt_mentions_persona_and_policy(barber):
    prompt = generate_system_prompt(barber)

    assert prompt.startswith("You are Priya, the virtual receptionist for Raj's Premium Salon")
    assert "Hindi and English mix (Hinglish)" in prompt
    assert barber.agentPersona.greeting in prompt
    assert "Ask ONE question at a time" in prompt
    assert "ALWAYS confirm all details before booking" in prompt


def test_prompt_lists_services_and_hours(barber):
    prompt = generate_system_prompt(barber)

    assert "- Haircut: ₹300 (30 minutes) - Professional haircut" in prompt
    assert "- Monday: 09:00 - 20:00" in prompt
    assert "- Sunday: 10:00 - 18:00" in prompt


def test_prompt_is_deterministic():
    for business in DEMO_BUSINESSES.values():
        assert generate_system_prompt(business) == generate_system_prompt(business)


def test_english_persona(dentist):
    prompt = generate_system_prompt(dentist)

    assert "Speak naturally in English" in prompt
    assert "- Sunday: Closed" in prompt


def test_hours_are_in_weekday_order(dentist):
    lines = format_hours(dentist).splitlines()

    assert [line.split(":")[0] for line in lines] == [
        "- Monday", "- Tuesday", "- Wednesday", "- Thursday", "- Friday", "- Saturday", "- Sunday",
    ]


def test_services_one_per_line(barber):
    assert len(format_services(barber).splitlines()) == len(barber.services)


def test_voice_selection():
    assert select_voice("barber", get_business("barber")) == "shimmer"
    assert select_voice("dentist", get_business("dentist")) == "sage"
    assert select_voice("gym", get_business("gym")) == "echo"
    assert select_voice("spa", get_business("spa")) == "coral"


def test_missing_persona_defaults_to_salon():
    assert get_business(None).id == "demo-barber"
    assert get_business("bakery") is None
