"""Prompt templates for the generative-text features.

Everything the user reads is Spanish, so the prompts are too.  Templates
are plain functions over ``Event`` models (or the raw event dict the
``/gemini`` route receives) so they can be unit-tested without an LLM.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from duende.models.event import Event

_WEEKDAYS_ES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")

NIGHT_PLAN_SYSTEM_PROMPT = (
    'Eres "Duende", un aficionado al flamenco y guía local que comparte secretos '
    "de su ciudad. Escribes en español, con un tono cercano, evocador y apasionado. "
    "Estructura siempre la respuesta en secciones Markdown y mantén los párrafos "
    "cortos para que se lean bien en el móvil. Envuelve el nombre de cada lugar "
    "que recomiendes entre corchetes: [Nombre del Lugar]."
)

TRIP_PLANNER_SYSTEM_PROMPT = (
    "Eres el mejor planificador de viajes flamencos de Andalucía: amable, experto "
    "y apasionado. Escribes en español, con un tono inspirador y práctico, y "
    "envuelves el nombre de cada lugar recomendado entre corchetes: [Nombre del Lugar]."
)

NO_EVENTS_MESSAGE = (
    "¡Qué pena! No hemos encontrado eventos de flamenco para esas fechas en ese destino. "
    "Prueba con otro rango de fechas o acércate a las peñas flamencas y tablaos locales "
    "de la ciudad."
)

_NIGHT_PLAN_SECTIONS = """\
### Un Pellizco de Sabiduría
Un dato curioso o histórico sobre el artista, el palo principal del espectáculo o el lugar.

### Calentando Motores: Antes del Espectáculo
Uno o dos bares de tapas o bodegas cerca del lugar, con su ambiente y un precio orientativo (€, €€ o €€€).

### El Templo del Duende: El Espectáculo
Qué se puede esperar del artista y del ambiente de la sala. Si la descripción lo permite, indica si es cantaor, bailaor, guitarrista...

### Para Alargar la Magia: Después del Espectáculo
Un sitio cercano para una última copa que encaje con la atmósfera de la noche.

### Consejos Prácticos
Dos o tres consejos breves: reserva, vestimenta, cómo llegar."""


def _value(value: Any, fallback: str = "sin especificar") -> str:
    text = str(value).strip() if value is not None else ""
    return text or fallback


def format_spanish_day(iso_date: str) -> str:
    """Render ``2025-08-05`` as ``martes 5``; unparseable dates pass through."""
    try:
        day = date.fromisoformat(iso_date)
    except ValueError:
        return iso_date
    return f"{_WEEKDAYS_ES[day.weekday()]} {day.day}"


def night_plan_prompt(event: Event | Mapping[str, Any]) -> str:
    """User prompt for a one-evening guide around a single event."""
    fields = event.to_document() if isinstance(event, Event) else dict(event)
    when = f"{_value(fields.get('date'))} {_value(fields.get('time'), '')}".rstrip()
    return (
        "Crea una mini-guía para una noche de flamenco inolvidable centrada en este evento.\n\n"
        "EVENTO:\n"
        f"- Nombre: {_value(fields.get('name'))}\n"
        f"- Artista: {_value(fields.get('artist'))}\n"
        f"- Fecha: {when}\n"
        f"- Lugar: {_value(fields.get('venue'))}, {_value(fields.get('city'))}\n"
        f"- Descripción: {_value(fields.get('description'), 'no disponible')}\n\n"
        "Sigue ESTRICTAMENTE esta estructura:\n\n"
        f"{_NIGHT_PLAN_SECTIONS}"
    )


def trip_planner_prompt(
    destination: str,
    start_date: str,
    end_date: str,
    events: Iterable[Event],
) -> str:
    """User prompt for a day-by-day itinerary built around *events*."""
    lines = [
        f'- {format_spanish_day(ev.date)}: "{_value(ev.name)}" con {_value(ev.artist)} '
        f"en {_value(ev.venue)}."
        for ev in events
    ]
    event_list = "\n".join(lines)
    return (
        f"Un viajero visitará {destination} desde el {start_date} hasta el {end_date}. "
        "Estos son los espectáculos disponibles:\n"
        f"{event_list}\n\n"
        "Crea un itinerario detallado siguiendo ESTRICTAMENTE estas reglas:\n\n"
        "1. **Estructura por días:** organiza el plan día a día.\n"
        "2. **Títulos temáticos:** da a cada día un título evocador "
        '(p. ej. "Martes: Inmersión en el Sacromonte").\n'
        "3. **Días con espectáculo:** el espectáculo es el punto culminante del día; "
        "sugiere actividades que lo complementen.\n"
        '4. **Días libres:** ofrece un "Plan A" cultural (museo, barrio emblemático, '
        'guitarrería) y un "Plan B" más relajado (clase de compás, mirador).\n'
        "5. **Glosario final:** termina con una sección "
        "`### Glosario Flamenco para el Viajero` que explique 2-3 términos usados "
        "(peña, tablao, duende, tercio...)."
    )
