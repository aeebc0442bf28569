from enum import Enum


class ConsumableUnit(str, Enum):
    MILLILITRES = "millilitres"
    GRAMS = "grams"
    INTERNATIONAL_UNITS = "international_units"
    NUMBER = "number"

    @property
    def postfix(self) -> str:
        return {
            ConsumableUnit.MILLILITRES: "ml",
            ConsumableUnit.GRAMS: "g",
            ConsumableUnit.INTERNATIONAL_UNITS: "IU",
            ConsumableUnit.NUMBER: "",
        }[self]


class ConsumptionType(str, Enum):
    DIGEST = "digest"
    INHALE_NOSE = "inhale_nose"
    INHALE_MOUTH = "inhale_mouth"
    SPIT_OUT = "spit_out"
    INJECT = "inject"
    APPLY_SKIN = "apply_skin"


class ExerciseType(str, Enum):
    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    INDOOR_CYCLING = "indoor_cycling"
    JUMPING = "jumping"
    SKIPPING = "skipping"
    FLYING = "flying"
    OTHER = "other"


# Borg CR10 style perceived exertion labels
RPE_TITLES: dict[int, str] = {
    1: "Very light",
    2: "Light",
    3: "Moderate",
    4: "Somewhat hard",
    5: "Hard",
    6: "Harder",
    7: "Very hard",
    8: "Very, very hard",
    9: "Extremely hard",
    10: "Maximal effort",
}


def rpe_title(rpe: int) -> str:
    return RPE_TITLES.get(rpe, "Unknown")
