"""
Static vocabularies shared by the recommendation and browsing services:
TMDB genre ids, language codes, film industries and mood mappings.
"""
from typing import Dict, List, Optional

GENRE_NAMES: Dict[int, str] = {
    28: "Action", 12: "Adventure", 16: "Animation", 35: "Comedy", 80: "Crime",
    99: "Documentary", 18: "Drama", 10751: "Family", 14: "Fantasy", 36: "History",
    27: "Horror", 10402: "Music", 9648: "Mystery", 10749: "Romance", 878: "Sci-Fi",
    10770: "TV Movie", 53: "Thriller", 10752: "War", 37: "Western",
}

GENRE_IDS: Dict[str, int] = {
    "action": 28, "adventure": 12, "animation": 16, "comedy": 35, "crime": 80,
    "documentary": 99, "drama": 18, "family": 10751, "fantasy": 14, "history": 36,
    "horror": 27, "music": 10402, "mystery": 9648, "romance": 10749, "sci-fi": 878,
    "science fiction": 878, "tv movie": 10770, "thriller": 53, "war": 10752, "western": 37,
}

LANGUAGE_CODES: Dict[str, str] = {
    "english": "en", "hindi": "hi", "spanish": "es", "french": "fr",
    "korean": "ko", "japanese": "ja", "tamil": "ta", "telugu": "te",
    "german": "de", "italian": "it", "chinese": "zh", "portuguese": "pt",
    "malayalam": "ml", "kannada": "kn", "bengali": "bn", "marathi": "mr",
    "punjabi": "pa", "gujarati": "gu",
}

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English", "hi": "Hindi", "ta": "Tamil", "te": "Telugu",
    "ml": "Malayalam", "kn": "Kannada", "bn": "Bengali", "mr": "Marathi",
    "ko": "Korean", "ja": "Japanese", "es": "Spanish", "fr": "French",
    "de": "German", "zh": "Chinese", "pt": "Portuguese", "it": "Italian",
}

# name, original language and release region per industry keyword
INDUSTRIES: Dict[str, Dict[str, str]] = {
    "bollywood": {"language": "hi", "region": "IN", "name": "Bollywood"},
    "hollywood": {"language": "en", "region": "US", "name": "Hollywood"},
    "korean cinema": {"language": "ko", "region": "KR", "name": "Korean Cinema"},
    "korean": {"language": "ko", "region": "KR", "name": "Korean Cinema"},
    "japanese cinema": {"language": "ja", "region": "JP", "name": "Japanese Cinema"},
    "japanese": {"language": "ja", "region": "JP", "name": "Japanese Cinema"},
    "tollywood": {"language": "te", "region": "IN", "name": "Tollywood"},
    "kollywood": {"language": "ta", "region": "IN", "name": "Kollywood"},
    "mollywood": {"language": "ml", "region": "IN", "name": "Mollywood"},
    "sandalwood": {"language": "kn", "region": "IN", "name": "Sandalwood"},
    "french cinema": {"language": "fr", "region": "FR", "name": "French Cinema"},
    "spanish cinema": {"language": "es", "region": "ES", "name": "Spanish Cinema"},
    "chinese cinema": {"language": "zh", "region": "CN", "name": "Chinese Cinema"},
}

LANGUAGE_INDUSTRY: Dict[str, str] = {
    "hi": "Bollywood", "ta": "Kollywood", "te": "Tollywood",
    "ml": "Mollywood", "kn": "Sandalwood", "bn": "Tollywood",
    "ko": "Korean Cinema", "ja": "Japanese Cinema", "en": "Hollywood",
    "fr": "French Cinema", "es": "Spanish Cinema", "zh": "Chinese Cinema",
}

MOOD_GENRES: Dict[str, List[int]] = {
    "happy": [35, 10751, 16],
    "sad": [18, 10749],
    "romantic": [10749, 35, 18],
    "bored": [28, 12, 53],
    "relaxed": [18, 35, 10402],
    "nostalgic": [18, 10751, 36],
    "motivated": [18, 36, 99],
    "angry": [28, 53, 80],
    "anxiety": [35, 10751, 16],
    "tired": [35, 16, 10402],
    "inspired": [18, 99, 36],
    "confused": [9648, 878, 35],
}

MOOD_TEMPLATES: Dict[str, List[str]] = {
    "happy": [
        "This uplifting film will brighten your mood",
        "Perfect feel-good entertainment for joyful moments",
        "A heartwarming story that celebrates life",
        "Guaranteed to put a smile on your face",
    ],
    "sad": [
        "A touching drama that resonates emotionally",
        "This poignant story offers comfort and understanding",
        "An emotional journey that connects with your feelings",
        "A beautifully crafted tale of human emotion",
    ],
    "romantic": [
        "A beautiful love story that warms the heart",
        "Romance at its finest in this enchanting film",
        "This charming tale of love will sweep you away",
        "Perfect for those seeking heartfelt romance",
    ],
    "bored": [
        "This captivating film will grab your attention",
        "An engaging story that breaks the monotony",
        "Surprising twists that keep you hooked",
        "Fresh entertainment to spark your interest",
    ],
    "relaxed": [
        "A laid-back film perfect for unwinding",
        "Easy-going entertainment for a chill evening",
        "Sit back and enjoy this comfortable watch",
        "The perfect movie for a relaxed viewing",
    ],
    "nostalgic": [
        "A timeless classic that brings back memories",
        "This film captures the essence of bygone eras",
        "A journey back to simpler, cherished times",
        "Reminiscent of the movies you grew up loving",
    ],
    "motivated": [
        "An inspiring story of triumph and success",
        "Fuel your drive with this motivational film",
        "Stories of perseverance that push you forward",
        "Get inspired by these incredible journeys",
    ],
    "angry": [
        "Channel that energy with this intense film",
        "Action-packed thrills to match your fire",
        "Let it out with this gripping experience",
        "High-stakes drama for when you need release",
    ],
    "anxiety": [
        "A calming watch to ease your mind",
        "Light-hearted comfort for anxious moments",
        "Feel-good entertainment to help you relax",
        "A gentle story to soothe your nerves",
    ],
    "tired": [
        "Easy watching for when you need to unwind",
        "A comfortable film that requires no effort",
        "Perfect for tired eyes and weary minds",
        "Gentle entertainment for a restful evening",
    ],
    "inspired": [
        "A thought-provoking film that sparks creativity",
        "Stories that ignite your imagination",
        "Beautiful narratives that inspire change",
        "Visionary filmmaking that opens new perspectives",
    ],
    "confused": [
        "A clear and engaging story to follow",
        "Entertainment that makes perfect sense",
        "A straightforward yet captivating watch",
        "Simple pleasures in this well-crafted film",
    ],
}

DEFAULT_TEMPLATES: List[str] = [
    "A great movie matching your current mood",
    "Perfect entertainment for right now",
    "This film fits your vibe perfectly",
    "Exactly what you're looking for",
]

# Runtime bounds in minutes: (gte, lte)
DURATION_RUNTIME: Dict[str, tuple] = {
    "short": (None, 100),
    "medium": (90, 150),
    "long": (150, None),
    "any": (None, None),
}


def genre_label(genre_ids: List[int], limit: int = 2) -> str:
    """'Comedy, Family' from TMDB genre ids; unknown ids read as Drama."""
    names = [GENRE_NAMES.get(genre_id, "Drama") for genre_id in genre_ids[:limit]]
    return ", ".join(names) or "Drama"


def language_code(language: str) -> str:
    lowered = language.strip().lower()
    return LANGUAGE_CODES.get(lowered, lowered)


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code.upper())


def industry_config(industry: str) -> Optional[Dict[str, str]]:
    return INDUSTRIES.get(industry.strip().lower())


def mood_templates(mood: str) -> List[str]:
    return MOOD_TEMPLATES.get(mood.strip().lower(), DEFAULT_TEMPLATES)
