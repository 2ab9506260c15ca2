import re

NUMBER_WORDS = {
    "cero": "0",
    "uno": "1",
    "dos": "2",
    "tres": "3",
    "cuatro": "4",
    "cinco": "5",
    "seis": "6",
    "siete": "7",
    "ocho": "8",
    "nueve": "9",
    "diez": "10",
    "once": "11",
    "doce": "12",
    "trece": "13",
    "catorce": "14",
    "quince": "15",
    "dieciséis": "16",
    "diecisiete": "17",
    "dieciocho": "18",
    "diecinueve": "19",
    "veinte": "20",
    "veintiuno": "21",
    "veintidós": "22",
    "veintitrés": "23",
    "veinticuatro": "24",
    "veinticinco": "25",
    "veintiséis": "26",
    "veintisiete": "27",
    "veintiocho": "28",
    "veintinueve": "29",
    "treinta": "30",
    "cuarenta": "40",
    "cincuenta": "50",
    "sesenta": "60",
    "setenta": "70",
    "ochenta": "80",
    "noventa": "90",
    "cien": "100",
}

DIGITS = re.compile(r"^\d+$")

REPS_UNIT = re.compile(r"^(repeticiones|repetición|repeticion|reps|rep)$", re.IGNORECASE)
WEIGHT_UNIT = re.compile(r"^(kilos|kilo|kg|libras|libra|lbs|lb)$", re.IGNORECASE)

REPS_PHRASE = re.compile(
    r"(\d+)\s*(?:repeticiones|repetición|repeticion|reps|rep)", re.IGNORECASE
)
WEIGHT_PHRASE = re.compile(r"(\d+)\s*(?:kilos|kilo|kg|libras|libra|lbs|lb)", re.IGNORECASE)
BARE_NUMBER = re.compile(r"(\d+)")

# Substring keywords, checked in order.
NEXT_WORDS = ("siguiente", "próximo")
PREVIOUS_WORDS = ("anterior", "previo")
ACCEPT_WORDS = ("aceptar", "este", "seleccionar")

REP_DONE_WORDS = ("arriba", "completado", "hecho", "uno")
FINISH_SERIES_WORDS = ("terminar serie", "siguiente serie")
FINISH_EXERCISE_WORDS = ("terminar ejercicio", "completar ejercicio")
SKIP_REST_WORDS = ("omitir descanso", "saltar descanso")

WORKOUT_ADVANCE_WORDS = ("finalizar ejercicio", "terminar ejercicio", "siguiente ejercicio")
WORKOUT_RETREAT_WORDS = ("ejercicio anterior",)


def contains_any(text: str, words: tuple[str, ...]) -> bool:
    return any(w in text for w in words)
