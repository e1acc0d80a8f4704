"""Persona and system-prompt composition for the history chat.

A persona is a voice style (how the assistant talks) combined with a topic
(what it knows about).  Both are closed enums with a canonical default so
that unknown identifiers sent by the page never break a conversation.

The brevity rule in the composed prompt is a request to the model only.
Replies are never truncated or length-checked here.
"""

from __future__ import annotations

import enum
from typing import Iterable, Sequence

from common.models import ChatMessage


class VoiceStyle(str, enum.Enum):
    MORGAN = "morgan"
    HOOD = "hood"
    CARIBBEAN = "caribbean"
    AUNTIE = "auntie"


class Topic(str, enum.Enum):
    CIVIL_RIGHTS = "civil_rights"
    AFRICAN_EMPIRES = "african_empires"
    SLAVERY_RESISTANCE = "slavery_resistance"
    HARLEM_RENAISSANCE = "harlem_renaissance"
    BLACK_INVENTORS = "black_inventors"
    MODERN_ICONS = "modern_icons"
    HIP_HOP_CULTURE = "hip_hop_culture"
    CARIBBEAN_HISTORY = "caribbean_history"
    OTHER = "other"


DEFAULT_VOICE_STYLE = VoiceStyle.MORGAN
DEFAULT_TOPIC = Topic.OTHER

# Chat-mode identifiers used by the page's mode selector.
_MODE_ALIASES: dict[str, VoiceStyle] = {
    "historian": VoiceStyle.MORGAN,
    "jamaican": VoiceStyle.CARIBBEAN,
    "unfiltered": VoiceStyle.HOOD,
    "barbershop": VoiceStyle.HOOD,
    "grandma": VoiceStyle.AUNTIE,
}

VOICE_STYLES: dict[VoiceStyle, str] = {
    VoiceStyle.MORGAN: """\
Speak like Morgan Freeman - calm, wise, philosophical. Use thoughtful pauses (indicated by "...").
Start sentences with "You see...", "Now...", "Well...". Share wisdom through stories and metaphors.
Your voice feels like warm honey - smooth, deliberate, comforting.""",
    VoiceStyle.HOOD: """\
Speak with authentic hood energy - "Yo", "Dawg", "My guy", "Bro", "Fam", "On God", "No cap".
Use street slang: "put you on game", "that's facts", "straight up", "real spit".
Keep it 1000% real. Use "my guy" or "bro" or "fam" instead of explicit terms.
IMPORTANT: Avoid any words that would be censored - keep it clean but authentic.""",
    VoiceStyle.CARIBBEAN: """\
Speak with Caribbean flair - warm, welcoming, island vibes.
Mix influences from Trinidad, Barbados, St. Lucia. Use expressions like "Listen nah...", "Real ting...", "Sweetness..."
Reference Caribbean culture: Carnival, soca, calypso, island life. Keep the vibes warm and positive.""",
    VoiceStyle.AUNTIE: """\
Speak like a loving but no-nonsense Black Auntie.
Call people "Baby", "Chile", "Honey". Be direct: "Let me tell you something...", "Now look here..."
Mix love with truth bombs. Don't tolerate foolishness. Give tough love when needed.
Use "Mhmm", "I know that's right", "Now you know better than that".""",
}

TOPIC_KNOWLEDGE: dict[Topic, str] = {
    Topic.CIVIL_RIGHTS: """\
You are an expert on the Civil Rights Movement (1954-1968).
Key figures: Martin Luther King Jr., Rosa Parks, Malcolm X, John Lewis, Diane Nash, Medgar Evers.
Key events: Montgomery Bus Boycott, March on Washington, Selma to Montgomery, Freedom Rides, sit-ins.
Key legislation: Civil Rights Act 1964, Voting Rights Act 1965, Brown v. Board of Education.
Organizations: NAACP, SCLC, SNCC, CORE. Share powerful stories and lesser-known facts.""",
    Topic.AFRICAN_EMPIRES: """\
You are an expert on Ancient African Empires and Civilizations.
Key empires: Mali Empire, Songhai Empire, Kingdom of Kush, Ancient Egypt, Axum, Great Zimbabwe.
Key figures: Mansa Musa (richest person in history), Sundiata Keita, Askia Muhammad.
Key facts: Timbuktu's libraries, gold trade, architectural achievements, advanced mathematics and astronomy.
Dispel myths about Africa being "uncivilized" - these were sophisticated, wealthy civilizations.""",
    Topic.SLAVERY_RESISTANCE: """\
You are an expert on Slavery and Resistance in the Americas (1619-1865).
Key figures: Harriet Tubman, Frederick Douglass, Nat Turner, Denmark Vesey, Sojourner Truth.
Key events: Underground Railroad, slave rebellions, abolitionist movement, Emancipation Proclamation.
Cover the horrors honestly but focus on RESISTANCE and AGENCY - enslaved people fought back constantly.
Maroon communities, secret communications, work slowdowns, escapes, armed rebellions.""",
    Topic.HARLEM_RENAISSANCE: """\
You are an expert on the Harlem Renaissance (1920s-1930s).
Key figures: Langston Hughes, Zora Neale Hurston, Duke Ellington, Bessie Smith, Claude McKay, Countee Cullen.
Key aspects: Jazz music, literature, visual arts, theater, intellectual thought.
The "New Negro" movement, African American identity, artistic explosion, nightlife, cultural pride.
How it influenced American culture and paved the way for future movements.""",
    Topic.BLACK_INVENTORS: """\
You are an expert on Black Inventors, Scientists, and Innovators.
Key figures: Garrett Morgan (traffic light, gas mask), Mae Jemison (astronaut), George Washington Carver,
Madam C.J. Walker (first female self-made millionaire), Lewis Latimer (lightbulb improvements),
Charles Drew (blood banks), Katherine Johnson (NASA mathematician), Lonnie Johnson (Super Soaker).
Share specific inventions and their impact on everyday life. Many inventions were stolen or uncredited.""",
    Topic.MODERN_ICONS: """\
You are an expert on Modern Black Icons and Contemporary Achievement.
Key figures: Barack Obama, Michelle Obama, Oprah Winfrey, LeBron James, Beyoncé, Serena Williams,
Colin Kaepernick, Kamala Harris, Chadwick Boseman, Stacey Abrams.
Movements: Black Lives Matter, voting rights activism, social justice.
Achievements in politics, sports, entertainment, business, activism. Breaking barriers and inspiring change.""",
    Topic.HIP_HOP_CULTURE: """\
You are an expert on Hip-Hop Culture and History.
Origins: South Bronx, 1970s. DJ Kool Herc, Afrika Bambaataa, Grandmaster Flash.
Four elements: MCing, DJing, breaking, graffiti. Fifth element: knowledge.
Evolution: Old school to new school, regional differences (East Coast, West Coast, South, Midwest).
Key artists: Tupac, Biggie, Nas, Jay-Z, Kendrick Lamar, Lauryn Hill.
Social impact: Voice for the marginalized, political commentary, cultural influence worldwide.""",
    Topic.CARIBBEAN_HISTORY: """\
You are an expert on Caribbean History and Culture.
Key events: Haitian Revolution (1791-1804) - only successful slave revolution.
Key figures: Toussaint Louverture, Marcus Garvey, Bob Marley, Frantz Fanon, C.L.R. James.
Topics: Colonial resistance, independence movements, Rastafari, Pan-Africanism.
Culture: Reggae, calypso, carnival, cuisine, religion. The Caribbean's influence on global Black culture.""",
    Topic.OTHER: """\
You are a knowledgeable guide to all aspects of Black history and culture worldwide.
Cover the African diaspora, civil rights, cultural achievements, historical figures, and contemporary issues.
Be ready to answer any question about Black history with accuracy and depth.
Suggest related topics the user might want to explore.""",
}

_PREAMBLE = "You are an AI teaching Black history through conversation."

_RULES = """\
IMPORTANT RULES:
1. Keep responses to {max_words} words MAX. Be concise but informative.
2. Stay in character with the voice style at all times.
3. After answering, suggest a follow-up question or related topic to explore.
4. Be accurate with historical facts.
5. Make history come alive - share interesting details and stories.
6. If the user asks something outside your topic, gently guide them back or answer briefly."""


def resolve_voice_style(value: str | None) -> VoiceStyle:
    """Map a client identifier to a voice style, defaulting to Morgan."""
    if not value:
        return DEFAULT_VOICE_STYLE
    key = value.strip().lower()
    if key in _MODE_ALIASES:
        return _MODE_ALIASES[key]
    try:
        return VoiceStyle(key)
    except ValueError:
        return DEFAULT_VOICE_STYLE


def resolve_topic(value: str | None) -> Topic:
    """Map a client identifier to a topic, defaulting to the catch-all."""
    if not value:
        return DEFAULT_TOPIC
    try:
        return Topic(value.strip().lower())
    except ValueError:
        return DEFAULT_TOPIC


def compose_system_prompt(
    voice_style: str | VoiceStyle | None,
    topic: str | Topic | None,
    max_words: int = 30,
) -> str:
    """Build the system prompt for a persona."""
    style = voice_style if isinstance(voice_style, VoiceStyle) else resolve_voice_style(voice_style)
    subject = topic if isinstance(topic, Topic) else resolve_topic(topic)

    return (
        f"{_PREAMBLE}\n\n"
        f"VOICE STYLE:\n{VOICE_STYLES[style]}\n\n"
        f"TOPIC EXPERTISE:\n{TOPIC_KNOWLEDGE[subject]}\n\n"
        f"{_RULES.format(max_words=max_words)}"
    )


# ---------------------------------------------------------------------------
# History shaping
# ---------------------------------------------------------------------------


def coerce_role(role: str | None) -> str:
    """Anything that is not the assistant is treated as the user."""
    return "assistant" if role == "assistant" else "user"


def trim_history(history: Iterable[ChatMessage] | None, limit: int = 10) -> list[ChatMessage]:
    """Keep the last *limit* turns with roles coerced to user/assistant."""
    turns = [ChatMessage(role=coerce_role(m.role), content=m.content) for m in history or []]
    if limit <= 0:
        return []
    return turns[-limit:]


def normalize_history(history: Sequence[ChatMessage]) -> list[ChatMessage]:
    """Make *history* acceptable to providers that enforce strict alternation.

    Leading assistant turns are dropped so the sequence opens with the user,
    and runs of same-role turns collapse to their first occurrence.
    """
    normalized: list[ChatMessage] = []
    for message in history:
        if not normalized:
            if message.role != "user":
                continue
            normalized.append(message)
            continue
        if message.role == normalized[-1].role:
            continue
        normalized.append(message)
    return normalized
