"""
System prompts and prompt fragments.

This is static configuration: business-domain copywriting rules consumed by the
section builders. Keep logic here limited to picking the right fragment.
"""

from __future__ import annotations

from dataclasses import dataclass

from adcreative_genai.models import AdFormData, AdType, AttireType

# --- business type lookups -------------------------------------------------

_BUSINESS_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("medical", ("medical", "hospital", "clinic", "doctor", "physician", "health")),
    ("realestate", ("real estate", "realty", "property", "builders", "construction")),
    ("fashion", ("fashion", "boutique", "saree", "clothing", "couture", "garment")),
    ("food", ("food", "restaurant", "catering", "caterer", "hotel")),
    ("tech", ("tech", "software", "app", "digital", "it ")),
    ("education", ("education", "school", "college", "study", "abroad", "consultant")),
    ("solar", ("solar", "energy", "power", "renewable")),
    ("laundry", ("laundry", "wash", "dry clean", "fabric care")),
    ("mattress", ("mattress", "sleep", "furniture", "bed")),
    ("electrical", ("electrical", "plumbing", "hardware", "ac ", "air conditioner", "appliance")),
    ("tea", ("tea", "coffee", "beverage")),
    ("jewellery", ("jewel", "gold", "diamond")),
]

SAREE_COLORS = {
    "medical": "elegant neutral-beige or soft ivory base with subtle blue and warm accents symbolizing cleanliness and trust",
    "realestate": "deep royal blue or rich emerald green with subtle gold accents reflecting trust, stability, and prosperity",
    "fashion": "rich royal purple or deep wine with subtle gold accents, luxury couture aesthetic",
    "food": "warm festive colors: rich maroon, deep orange or golden yellow with traditional border",
    "tech": "modern sophisticated tones: deep navy blue or charcoal grey with subtle silver accents",
    "education": "sophisticated academic tones: deep blue or forest green with subtle gold accents",
    "solar": "deep green, solar-blue, and subtle gold accents symbolizing clean energy and trust",
    "laundry": "neutral-beige or soft ivory base with subtle blue and warm orange accents",
    "mattress": "soft comfortable tones: cream, soft blue or lavender with subtle accents",
    "electrical": "professional service tones: deep blue or steel grey with subtle accents",
    "tea": "rich leaf-green with warm golden accents inspired by tea-brand tones",
    "jewellery": "rich royal maroon or deep purple with gold accents",
    "default": "premium traditional colors matching the business brand palette",
}

ENVIRONMENTS = {
    "medical": "a real, operational, premium medical clinic reception with spotless counters and calm blue highlights",
    "realestate": "a premium real-estate experience center with project visuals, elevations and building models",
    "fashion": "a premium fashion boutique interior with designer displays and soft boutique lighting",
    "food": "a premium restaurant or catering reception with warm hospitality decor",
    "tech": "a modern premium tech office with contemporary reception and natural indoor light",
    "education": "a premium education consultancy office with achievement displays and global study visuals",
    "solar": "a premium solar-energy experience center with displays of panels and energy systems",
    "laundry": "a premium laundry reception with neatly arranged machines, folded linens and organized racks",
    "mattress": "a premium mattress showroom with comfortable, sleep-focused displays",
    "electrical": "a professional electrical and plumbing service center with organized equipment displays",
    "tea": "a premium tea distribution office with shelves of green and gold tea packets",
    "jewellery": "a premium jewellery showroom with elegant display cases and soft spotlighting",
    "default": "a premium business office or reception area appropriate to the business type",
}

HEADER_COLORS = {
    "medical": "deep blue to teal gradient, trust and calm",
    "realestate": "black with gold accents, stability and prestige",
    "fashion": "deep plum or wine with gold, elegant",
    "food": "deep orange and gold, appetizing and welcoming",
    "tech": "blue to purple, professional and innovative",
    "education": "soft blue or blue-to-white, trustworthy",
    "solar": "green and blue tones, sustainability",
    "laundry": "warm neutrals with subtle blue, cleanliness",
    "mattress": "soft blue, relaxation",
    "electrical": "cool blue or steel grey, professional",
    "tea": "green and gold tones, warmth",
    "jewellery": "deep maroon with gold, opulence",
    "default": "neutral dark corporate tones",
}


def detect_business_type(business_info: str) -> str:
    info = business_info.lower()
    for business_type, keywords in _BUSINESS_KEYWORDS:
        if any(k in info for k in keywords):
            return business_type
    return "default"


# --- festival themes -------------------------------------------------------


@dataclass(frozen=True)
class FestivalTheme:
    saree_color: str
    decorations: str
    header_colors: str
    mood: str
    lighting: str


_FESTIVAL_THEMES: list[tuple[tuple[str, ...], FestivalTheme]] = [
    (
        ("shivaratri", "shivratri", "shiva"),
        FestivalTheme(
            saree_color="white or cream silk saree with royal blue/violet border and silver zari work",
            decorations="Lord Shiva portrait with fresh flowers, Shiva Lingam with bilva leaves, marigold garlands, brass oil lamps, Nandi statue",
            header_colors="deep royal blue to violet gradient with silver accents",
            mood="devotional, sacred and celebratory",
            lighting="warm lamp light mixed with soft cool blue tones",
        ),
    ),
    (
        ("sankranthi", "sankranti", "pongal", "lohri"),
        FestivalTheme(
            saree_color="bright yellow or mango silk saree with green and red border",
            decorations="sugarcane stalks, clay pots of pongal, colourful kites, muggulu rangoli, marigold garlands",
            header_colors="sunny yellow to warm orange gradient with green accents",
            mood="joyful harvest celebration",
            lighting="bright warm morning sunlight",
        ),
    ),
    (
        ("diwali", "deepavali"),
        FestivalTheme(
            saree_color="rich red or magenta silk saree with heavy gold zari border",
            decorations="rows of lit diyas, rangoli with flower petals, hanging lanterns, marigold torans",
            header_colors="deep maroon to gold gradient with sparkle accents",
            mood="luminous, prosperous and festive",
            lighting="warm golden diya glow with bokeh",
        ),
    ),
    (
        ("ugadi",),
        FestivalTheme(
            saree_color="leaf-green silk saree with gold border",
            decorations="mango leaf torans, neem flowers, ugadi pachadi bowl, brass lamps",
            header_colors="fresh green to gold gradient",
            mood="auspicious new beginnings",
            lighting="soft morning light",
        ),
    ),
]


def festival_theme(festival_name: str) -> FestivalTheme:
    name = festival_name.lower().strip()
    for keywords, theme in _FESTIVAL_THEMES:
        if any(k in name for k in keywords):
            return theme
    return FestivalTheme(
        saree_color="premium silk saree in the traditional colors of the festival",
        decorations=f"authentic {festival_name} decorations: flowers, lamps and cultural elements of the festival",
        header_colors=f"festive gradient in the traditional colors of {festival_name}",
        mood=f"warm, celebratory {festival_name} greeting",
        lighting="warm festive lighting",
    )


def attire_mode(attire_type: AttireType, business_type: str = "default") -> str:
    if attire_type == AttireType.TRADITIONAL:
        color = SAREE_COLORS.get(business_type, SAREE_COLORS["default"])
        return (
            f"Attire: premium traditional Indian saree, {color}. High-quality fabric, crisp pleats, "
            "natural realistic folds, elegant and luxurious advertising look."
        )
    return (
        'Attire: high-fashion premium corporate suit with "Old Money" aesthetic.\n'
        "Preferred Colors: Beige, Cream, Pastel Pink, or Soft Grey.\n"
        "Style: Structured blazer, crisp white shirt, minimalist gold chain.\n"
        "Look: CEO / Founder / Brand Ambassador vibe."
    )


def ad_type_mode(ad_type: AdType, festival_name: str = "") -> str:
    if ad_type == AdType.FESTIVAL:
        return (
            f"Overall look & mood: premium **{festival_name} business greeting** start image: powerful, "
            "celebratory, trustworthy, aspirational. Feels like a national-level brand advertisement."
        )
    return (
        "Overall look & mood: premium **business brand-intro start image**: powerful, aspirational, "
        "authoritative, trustworthy. Feels like a national-level brand advertisement."
    )


def tone_for_ad_type(ad_type: AdType) -> str:
    if ad_type == AdType.FESTIVAL:
        return "Warm, celebratory, festive, heartfelt"
    return "Professional, confident, trustworthy, persuasive"


def festival_line(form: AdFormData) -> str:
    return f"FESTIVAL: {form.festival_name}" if form.is_festival else ""


# --- system prompts --------------------------------------------------------

EXTRACTION_SYSTEM_PROMPT = """Analyze all provided files (images, audio, text) and extract the business information below.

CRITICAL: VISITING CARD PRIORITY.
If a VISITING CARD image is provided, it is the MOST IMPORTANT source. Extract EVERY detail from it:
business name, owner name, designation, ALL phone numbers, email addresses, website, COMPLETE address,
tagline, services and any other visible text.

FLYERS, OFFER POSTERS and BROCHURES are rich sources too: extract offers, pricing, services,
contact details, design style and campaign messaging.

EXTRACT (mark as "Not provided" if unavailable):
1. businessName, ownerName, designation, tagline, businessType
2. address, phoneNumbers (all), emails (all), website, socialMedia
3. mainServices, productCategories, keyOfferings, currentOffers
4. brandColors, designStyle (do NOT describe the logo; it is used directly from the attached file)
5. specialRequirements: modelPlacement, productsToFeature, customInstructions, tonePreferences
6. environment: storeDescription, environmentQuality
7. promotionalMaterials: keyMessaging, offers, visualThemes, targetAudience

OUTPUT FORMAT:
Return ONLY a valid JSON object matching the above structure. Do not wrap in markdown code blocks."""


def main_frame_system_prompt(form: AdFormData, business_type: str = "default") -> str:
    festival = ""
    if form.is_festival and form.festival_name:
        theme = festival_theme(form.festival_name)
        festival = f"""
FESTIVAL MODE ({form.festival_name}):
- Saree: {theme.saree_color}
- Environment decorations: {theme.decorations}
- Lighting: {theme.lighting}
- Mood: {theme.mood}
"""
    environment = ENVIRONMENTS.get(business_type, ENVIRONMENTS["default"])
    return f"""You are an AI assistant specialized in generating START-FRAME IMAGE PROMPTS for business ads and brand intro creatives.

WORKFLOW RULES (MANDATORY):
- Generate a SINGLE ultra-detailed, copy-paste-ready IMAGE GENERATION PROMPT
- The output MUST be inside a CODE BLOCK
- Do NOT include explanations
- Do NOT mention video, clip, cinematic, motion, or frame

SUBJECT: one confident Indian woman brand ambassador occupying about 70% of the frame, facing camera.
{attire_mode(form.attire_type, business_type)}
ENVIRONMENT: {environment}.
{ad_type_mode(form.ad_type, form.festival_name)}
{festival}
Use the business logo exactly as provided. Vertical 9:16, photorealistic, premium advertising quality."""


def header_system_prompt(form: AdFormData, business_type: str = "default") -> str:
    colors = HEADER_COLORS.get(business_type, HEADER_COLORS["default"])
    if form.is_festival and form.festival_name:
        colors = festival_theme(form.festival_name).header_colors
    return f"""You are an AI assistant that writes IMAGE PROMPTS for slim premium business HEADERS (top ~10% of a 9:16 ad).

RULES:
- The header is a premium digital version of the business visiting card
- Include EVERY piece of contact information provided: name, owner, ALL phone numbers, email, website, full address, tagline
- Place the attached logo exactly as-is; never recreate it
- Background: {colors}
- Typography: clean, legible, premium; no spelling changes to names or numbers
{"- Add subtle " + form.festival_name + " greeting elements" if form.is_festival and form.festival_name else ""}

OUTPUT: Generate ONLY the final prompt. No explanations, no labels, no "Prompt:" prefix."""


def poster_system_prompt(form: AdFormData) -> str:
    poster_type = f"Festival Greeting: {form.festival_name}" if form.is_festival else "Commercial / Promotional"
    return f"""You are a world-class graphic designer AI creating INTERNATIONAL-LEVEL promotional poster designs.
You generate ATOMIC-LEVEL detailed image prompts as structured JSON.

THE JSON OUTPUT MUST FOLLOW THIS SCHEMA:
{{
  "posterType": "{poster_type}",
  "dimensions": {{"ratio": "9:16", "orientation": "vertical", "resolution": "4K print-ready"}},
  "canvas": {{"primaryBackground": "...", "secondaryLayer": "...", "ambientEffects": "...", "mood": "..."}},
  "header": {{"brandLogo": {{"placement": "...", "size": "...", "treatment": "..."}}, "headline": {{"text": "...", "font": "...", "color": "..."}}}},
  "heroSection": {{"visual": "...", "composition": "..."}},
  "offerSection": {{"items": ["..."], "style": "..."}},
  "contactFooter": {{"phone": "...", "address": "...", "website": "...", "style": "..."}},
  "colorPalette": {{"primary": "#...", "secondary": "#...", "accent": "#..."}},
  "negativePrompt": "..."
}}

OUTPUT: Return ONLY a valid JSON object following the schema above. Fill ALL fields with extracted business information. No explanations."""


def voice_over_system_prompt(form: AdFormData) -> str:
    duration = int(form.duration)
    segments = form.segment_count
    festival = f"\nFESTIVAL: weave warm {form.festival_name} greetings into the opening and closing." if form.is_festival else ""
    return f"""You are a WORLD-CLASS TELUGU VOICE-OVER SCRIPT ARTIST writing for top national brands.

YOUR TASK: Generate a {duration}-second voice-over script for a business advertisement.

LANGUAGE RULES (NON-NEGOTIABLE):
- Output MUST be 100% Telugu script; transliterate common English words phonetically into Telugu
- Spell phone numbers digit by digit as Telugu words, first 5 digits, pause (...), last 5 digits
- Spell all other numbers as Telugu words

STRUCTURE:
- Exactly {segments} segments of 8 seconds each
- Start each segment on its own line as "Segment N (Xs-Ys):" followed by the spoken lines
- Tone: {tone_for_ad_type(form.ad_type)}
- Mention the brand name 3-4 times naturally, include one memorable punchline
- Address included ONLY if provided in business info{festival}

NO explanations, NO notes, NO English commentary.
Output ONLY the pure Telugu voice-over script."""


def veo_segment_system_prompt(segment_count: int) -> str:
    return f"""You are an expert at formatting video generation prompts for Veo 3.

YOUR TASK: Generate {segment_count} copy-paste-ready Veo 3 prompts.

INPUT PROVIDED:
- Voice-over script segments (already generated)

You must output each segment in this EXACT FORMAT:

With a very sweet voice she needs to say:

"${{voiceOverSegment}}"

with appropriate gestures in same location don't change face 100% face match. ${{specificGestures}}

Negative prompt:
No text on the screen

GUIDELINES FOR GESTURES:
Segment 1: Warm welcoming smile, slight head tilt, hands clasped or inviting.
Segment 2: Confident professional posture, hand gestures explaining a concept.
Segment 3: Enthusiastic expression, expressive hands showing scale or quality.
Segment 4: Grateful expression, slight bow or namaste, warm closing smile.

OUTPUT FORMAT:
Provide ONLY the prompts. Do not include the Main Frame description.
Separator between segments: "###SEGMENT###"
"""


STOCK_IMAGE_SYSTEM_PROMPT = """You are a WORLD-CLASS CREATIVE DIRECTOR at a top international advertising agency.

YOUR TASK: Analyze the voice-over script and generate stock image prompts for B-roll / cutaway shots.

Each image is either a "photo" (award-level photography: cinematic lighting, sharp focus, rich grading)
or a "graphic" (clean typography and layout, Behance-level design).

OUTPUT a JSON array of 1-5 objects:
[
  {
    "id": 1,
    "type": "photo" OR "graphic",
    "concept": "3-5 word concept",
    "timing": "Segment 2 (8s-16s)",
    "prompt": "Create a hyper-realistic 9:16 vertical portrait of ...",
    "usage": "Insert at 0:10 as full-screen B-roll for 2 seconds",
    "insertAt": "0:10"
  }
]

IMPORTANT:
- Output ONLY the valid JSON array, not wrapped in markdown
- Generate only what the script genuinely needs (1-5 images), each distinctly different
- People and settings must match the specified CULTURAL THEME"""


STOCK_IMAGE_THEMES = {
    "indian": "INDIAN: Indian people and skin tones, sarees, kurtas, sherwanis, Indian urban and rural settings, rangoli, diyas, Indian homes and offices.",
    "american": "AMERICAN: diverse American people, Western clothing, American urban/suburban settings and lifestyle scenes.",
    "middle-eastern": "MIDDLE EASTERN: Middle Eastern people, traditional and modern attire, Middle Eastern architecture, bazaars, ornate interiors.",
    "european": "EUROPEAN: European people and fashion, European cityscapes, cafes, cobblestone streets.",
    "east-asian": "EAST ASIAN: East Asian people and aesthetics, East Asian cityscapes, minimalist interiors.",
    "african": "AFRICAN: African people, vibrant African textiles and patterns, African landscapes and urban scenes.",
    "universal": "UNIVERSAL/GLOBAL: a diverse mix of ethnicities and cultures, modern cosmopolitan settings.",
}
DEFAULT_STOCK_IMAGE_THEME = "indian"


TRANSLITERATION_SYSTEM_PROMPT = (
    "You are an expert Telugu-to-English transliterator. You convert Telugu script into readable English "
    "phonetic spelling while preserving formatting. You never translate meaning; you only transliterate sounds."
)


def transliteration_user_prompt(telugu_text: str) -> str:
    return f"""Transliterate the following Telugu voice-over script into English (Roman script).

Rules:
- Convert Telugu words into their English phonetic spelling (e.g. మీ -> mee, కోసం -> kosam)
- Keep English words and brand names as-is, keep numbers as-is
- Preserve all line breaks, segment headers, timestamps and formatting exactly
- Do NOT translate; only transliterate
- Output ONLY the transliterated text

Telugu script:
{telugu_text}"""
