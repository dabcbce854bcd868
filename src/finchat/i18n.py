from __future__ import annotations

DEFAULT_LANGUAGE = "en"

_CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "chatbot.welcomeMessage": "Hi! I'm your financial assistant. Ask me anything about your money.",
        "chatbot.errorMessage": "Sorry, I couldn't respond right now. Please try again in a moment.",
        "chatbot.status.online": "Online",
        "chatbot.status.thinking": "Thinking...",
        "dashboard.offline": "You are offline. Some features may not work until your connection is back.",
        "cli.banner": "finchat (type 'exit' to quit, '/help' for commands)",
        "cli.help": (
            "Commands: /help, /lang <code>, /history, /status, /online, /offline. "
            "Type 'exit' or 'quit' to leave."
        ),
        "cli.language_set": "Language set to {language}.",
        "cli.language_usage": "Usage: /lang <code>, for example /lang hi",
        "cli.status": "Status: {status} | Language: {language} | Messages: {count}",
        "cli.unknown_command": "Unknown command: {command}. Type /help for the list.",
    },
    "hi": {
        "chatbot.welcomeMessage": "नमस्ते! मैं आपका वित्तीय सहायक हूँ। अपने पैसों के बारे में कुछ भी पूछें।",
        "chatbot.errorMessage": "क्षमा करें, मैं अभी जवाब नहीं दे सका। कृपया थोड़ी देर बाद फिर से प्रयास करें।",
        "chatbot.status.online": "ऑनलाइन",
        "chatbot.status.thinking": "सोच रहा हूँ...",
        "dashboard.offline": "आप ऑफ़लाइन हैं। कनेक्शन वापस आने तक कुछ सुविधाएँ काम नहीं कर सकतीं।",
        "cli.language_set": "भाषा {language} पर सेट की गई।",
    },
    "es": {
        "chatbot.welcomeMessage": "¡Hola! Soy tu asistente financiero. Pregúntame lo que quieras sobre tu dinero.",
        "chatbot.errorMessage": "Lo siento, no pude responder ahora. Inténtalo de nuevo en un momento.",
        "chatbot.status.online": "En línea",
        "chatbot.status.thinking": "Pensando...",
        "dashboard.offline": "Estás sin conexión. Algunas funciones no estarán disponibles hasta que vuelva la conexión.",
        "cli.language_set": "Idioma cambiado a {language}.",
    },
}


def primary_language(code: str | None) -> str:
    """Reduce a language tag such as ``en-US`` or ``hi_IN`` to ``en`` / ``hi``."""
    if not code:
        return DEFAULT_LANGUAGE
    return code.strip().replace("_", "-").split("-", 1)[0].lower() or DEFAULT_LANGUAGE


def supported_languages() -> list[str]:
    return sorted(_CATALOGS)


def t(key: str, lang: str | None = None, /, **kwargs: object) -> str:
    """Look up ``key`` for ``lang``, falling back to English, then the key itself.

    Keyword arguments are substituted into the message template.
    """
    catalog = _CATALOGS.get(primary_language(lang), {})
    template = catalog.get(key) or _CATALOGS[DEFAULT_LANGUAGE].get(key)
    if template is None:
        return key
    if kwargs:
        return template.format(**kwargs)
    return template
