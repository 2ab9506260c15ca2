"""Catalog of equipment-free alternatives for busy machines."""
from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict


class AlternativeExercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    muscle_group: str
    instructions: tuple[str, ...]
    series: int
    repetitions: int
    muscles: str
    note: str | None = None
    image: str | None = None
    # repetitions are seconds of holding the position
    timed: bool = False


ALTERNATIVE_EXERCISES: tuple[AlternativeExercise, ...] = (
    AlternativeExercise(
        id="1",
        name="Flexiones Estándar",
        muscle_group="PECHO",
        instructions=(
            "Colócate en posición de plancha con las manos a la altura de los hombros",
            "Mantén el cuerpo en línea recta desde los tobillos hasta la cabeza",
            "Baja el cuerpo doblando los codos hasta casi tocar el suelo con el pecho",
            "Empuja con las palmas para volver a la posición inicial",
            "Mantén los músculos abdominales contraídos durante todo el movimiento",
        ),
        series=4,
        repetitions=12,
        muscles="Pectoral mayor, pectoral menor, deltoides anterior y tríceps",
        note="Mantén el ritmo controlado para maximizar la tensión muscular",
        image="images/flexiones.png",
    ),
    AlternativeExercise(
        id="2",
        name="Fondos entre Bancos",
        muscle_group="PECHO",
        instructions=(
            "Siéntate entre dos bancos paralelos (o un banco y una silla estable)",
            "Coloca las manos en el borde del banco detrás de ti",
            "Extiende las piernas frente a ti y apóyate en los talones",
            "Eleva las caderas del suelo y mantén el cuerpo recto",
            "Baja el cuerpo flexionando los codos hasta formar un ángulo de 90 grados",
            "Empuja con los brazos para volver a la posición inicial",
        ),
        series=3,
        repetitions=12,
        muscles="Pectoral inferior, tríceps y deltoides anterior",
        note="Mantén los hombros alejados de las orejas durante todo el movimiento",
        image="images/fondos-entre-bancos.png",
    ),
    AlternativeExercise(
        id="3",
        name="Remo con Mancuerna a Una Mano",
        muscle_group="ESPALDA",
        instructions=(
            "Coloca un banco y toma una mancuerna con una mano",
            "Apoya la rodilla y la mano del mismo lado en el banco",
            "La pierna del lado de la mancuerna permanece extendida con el pie apoyado",
            "Mantén la espalda plana y paralela al suelo",
            "Deja que la mancuerna cuelgue con el brazo extendido",
            "Tira de la mancuerna hacia arriba, llevando el codo hacia el techo",
            "Baja lentamente la mancuerna hasta volver a la posición inicial",
        ),
        series=3,
        repetitions=15,
        muscles="Dorsal ancho, romboides, trapecio medio e inferior, bíceps",
        note="Mantén el codo cerca del cuerpo durante el movimiento",
        image="images/remo-mancuerna.png",
    ),
    AlternativeExercise(
        id="4",
        name="Superman",
        muscle_group="ESPALDA",
        instructions=(
            "Túmbate boca abajo sobre una colchoneta con los brazos extendidos",
            "Mantén las piernas rectas y juntas",
            "Eleva simultáneamente brazos, pecho y piernas del suelo",
            "Mantén la posición en el punto más alto durante 2-3 segundos",
            "Baja lentamente a la posición inicial",
        ),
        series=4,
        repetitions=12,
        muscles="Erector espinal, glúteos, deltoides posteriores y trapecio",
        note="Mantén la mirada hacia el suelo para proteger las cervicales",
        image="images/superman.png",
    ),
    AlternativeExercise(
        id="5",
        name="Sentadillas Búlgaras",
        muscle_group="PIERNAS",
        instructions=(
            "Colócate de pie a unos 60-70 cm frente a un banco",
            "Coloca la parte superior de un pie sobre el banco, detrás de ti",
            "El otro pie debe estar firme en el suelo",
            "Mantén el torso erguido y la mirada al frente",
            "Desciende doblando la rodilla hasta que el muslo esté paralelo al suelo",
            "Regresa a la posición inicial empujando a través del talón",
        ),
        series=3,
        repetitions=12,
        muscles="Cuádriceps, glúteos, isquiotibiales y aductores",
        note="La rodilla delantera no debe sobrepasar la punta del pie",
        image="images/sentadillas-bulgaras.png",
    ),
    AlternativeExercise(
        id="6",
        name="Peso Muerto Rumano con Mancuernas",
        muscle_group="PIERNAS",
        instructions=(
            "Ponte de pie con los pies separados al ancho de las caderas",
            "Sostén una mancuerna en cada mano frente a los muslos",
            "Mantén las rodillas ligeramente flexionadas durante todo el ejercicio",
            "Empuja las caderas hacia atrás mientras bajas el torso",
            "Desliza las mancuernas por delante de las piernas hasta la mitad de las espinillas",
            "Regresa a la posición inicial empujando las caderas hacia adelante",
        ),
        series=3,
        repetitions=12,
        muscles="Isquiotibiales, glúteos, erector espinal y trapecio inferior",
        note="Mantén la espalda recta durante todo el movimiento",
        image="images/peso-muerto-rumano.png",
    ),
    AlternativeExercise(
        id="7",
        name="Press de Hombros con Mancuernas",
        muscle_group="HOMBROS",
        instructions=(
            "Permanece de pie con los pies separados al ancho de las caderas",
            "Sostén una mancuerna en cada mano a la altura de los hombros",
            "Contrae el core y mantén la espalda recta",
            "Empuja las mancuernas hacia arriba hasta extender los brazos",
            "Haz una breve pausa en la posición superior",
            "Baja las mancuernas de forma controlada hasta la posición inicial",
        ),
        series=3,
        repetitions=12,
        muscles="Deltoides (principalmente anterior y lateral), trapecio superior y tríceps",
        note="Evita arquear la espalda al levantar el peso",
        image="images/press-hombros.png",
    ),
    AlternativeExercise(
        id="8",
        name="Elevaciones Laterales con Botellas o Bandas",
        muscle_group="HOMBROS",
        instructions=(
            "Ponte de pie con los pies separados al ancho de las caderas",
            "Sostén una botella/banda en cada mano a los lados del cuerpo",
            "Mantén los codos ligeramente flexionados",
            "Eleva los brazos hacia los lados hasta que estén paralelos al suelo",
            "Mantén una breve pausa en la posición más alta",
            "Baja lentamente a la posición inicial",
        ),
        series=3,
        repetitions=15,
        muscles="Deltoides lateral, deltoides anterior y trapecio superior",
        note="No eleves los brazos por encima de la altura de los hombros",
        image="images/elevaciones-laterales.png",
    ),
    AlternativeExercise(
        id="9",
        name="Curl de Bíceps con Bandas Elásticas",
        muscle_group="BRAZOS",
        instructions=(
            "Párate sobre el centro de una banda elástica",
            "Agarra ambos extremos de la banda con las palmas hacia adelante",
            "Mantén los codos pegados a los costados",
            "Flexiona los codos y lleva las manos hacia los hombros",
            "Aprieta los bíceps en la posición superior",
            "Baja lentamente a la posición inicial con control",
        ),
        series=3,
        repetitions=15,
        muscles="Bíceps braquial, braquial anterior y braquiorradial",
        note="La resistencia aumenta a medida que estiras la banda",
        image="images/curl-biceps-bandas.png",
    ),
    AlternativeExercise(
        id="10",
        name="Extensiones de Tríceps con Peso Corporal",
        muscle_group="BRAZOS",
        instructions=(
            "Siéntate en el borde de un banco o silla estable",
            "Coloca las manos en el borde del banco, a ambos lados de las caderas",
            "Desliza las caderas hacia adelante, manteniendo el peso sobre las manos",
            "Dobla los codos hasta formar un ángulo de 90 grados",
            "Empuja con los tríceps para volver a la posición inicial",
            "Mantén los hombros alejados de las orejas durante todo el movimiento",
        ),
        series=3,
        repetitions=12,
        muscles="Tríceps braquial (todas las cabezas)",
        note="Los codos deben apuntar hacia atrás, no hacia los lados",
        image="images/extensiones-triceps.png",
    ),
    AlternativeExercise(
        id="11",
        name="Plancha",
        muscle_group="CORE",
        instructions=(
            "Colócate en posición de plancha con antebrazos y dedos de los pies apoyados",
            "Alinea el cuerpo formando una línea recta desde los tobillos hasta la cabeza",
            "Contrae el abdomen llevando el ombligo hacia la columna",
            "Mantén los glúteos y cuádriceps activos",
            "Respira de manera normal, sin contener la respiración",
            "Mantén la posición durante el tiempo indicado",
        ),
        series=4,
        repetitions=40,
        muscles="Recto abdominal, oblicuos, transverso del abdomen y estabilizadores",
        note="La espalda debe permanecer plana, sin hundirse ni arquearse",
        image="images/plancha.png",
        timed=True,
    ),
    AlternativeExercise(
        id="12",
        name="Mountain Climbers",
        muscle_group="CORE",
        instructions=(
            "Comienza en posición de plancha alta, manos bajo los hombros",
            "Mantén el cuerpo en línea recta desde la cabeza hasta los talones",
            "Lleva una rodilla hacia el pecho, sin elevar las caderas",
            "Regresa esa pierna mientras llevas la otra rodilla hacia el pecho",
            "Alterna las piernas en un movimiento continuo y controlado",
            "Mantén el core contraído durante todo el ejercicio",
        ),
        series=4,
        repetitions=40,
        muscles="Recto abdominal, oblicuos, flexores de cadera y cuádriceps",
        note="Ajusta la velocidad para mantener una buena forma",
        image="images/mountain-climbers.png",
        timed=True,
    ),
)

# Order within each list is the carousel order.
MACHINE_ALTERNATIVES: dict[str, list[str]] = {
    "press_banca": ["1", "2"],
    "remo_maquina": ["3", "4"],
    "prensa_piernas": ["5", "6"],
    "press_hombros": ["7", "8"],
    "curl_biceps": ["9"],
    "extension_triceps": ["10"],
    "maquina_abdominales": ["11", "12"],
    # program exercises, keyed by machine_id(exercise name)
    "press_de_hombros_con_barra": ["7", "8"],
    "sentadilla_con_barra": ["5", "6"],
    "press_de_pecho_con_mancuernas": ["1", "2"],
    "remo_inclinado_con_barra": ["3", "4"],
    "peso_muerto_con_mancuernas": ["6", "5"],
    "estocada_con_mancuernas": ["5"],
    "clean_con_barra": ["6", "12"],
    "sentadilla_frontal_con_barra": ["5", "6"],
    "press_de_pecho_inclinado_con_mancuernas": ["1", "2"],
    "dominadas/jalón_al_pecho": ["3", "4"],
    "peso_muerto_con_barra": ["6", "4"],
    "estocada_con_barra": ["5"],
    "clean_y_press_con_barra": ["7", "6"],
    "press_de_pecho_con_barra": ["1", "2"],
    "peso_muerto_rumano_con_barra": ["6"],
    "sentadilla_split_con_mancuernas": ["5"],
}

_BY_ID = {ex.id: ex for ex in ALTERNATIVE_EXERCISES}


def machine_id(exercise_name: str) -> str:
    """Derive the machine identifier used for ``exercise_name``."""
    return re.sub(r"\s+", "_", exercise_name.lower())


def get_exercise(exercise_id: str) -> AlternativeExercise | None:
    return _BY_ID.get(exercise_id)


def alternatives_for(machine: str) -> list[AlternativeExercise]:
    """Return the alternatives for ``machine`` in carousel order.

    Unknown ids in the mapping are skipped; an unknown machine yields an
    empty list.
    """
    ids = MACHINE_ALTERNATIVES.get(machine, [])
    return [_BY_ID[i] for i in ids if i in _BY_ID]
