from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import EntryMixin

INTENSITY_FIELDS: tuple[str, ...] = (
    "appetite_loss",
    "fever",
    "cough",
    "sore_throat",
    "nasal_symptom",
    "sneezing",
    "heart_burn",
    "abdominal_pain",
    "diarrhea",
    "constipation",
    "lower_back_pain",
    "upper_back_pain",
    "neck_pain",
    "joint_pain",
    "headache",
    "nausea",
    "dizziness",
    "stomach_ache",
    "chest_pain",
    "shortness_of_breath",
    "fatigue",
    "anxiety",
    "depression",
    "insomnia",
    "shoulder_pain",
    "hand_pain",
    "foot_pain",
    "wrist_pain",
    "dental_pain",
    "eye_pain",
    "ear_pain",
    "feeling_hot",
    "feeling_cold",
    "feeling_thirsty",
)

# description column -> intensity it describes
DESCRIBED_FIELDS: dict[str, str] = {
    "nasal_symptom_description": "nasal_symptom",
    "abdominal_pain_location": "abdominal_pain",
    "dental_pain_description": "dental_pain",
}


def _intensity() -> Mapped[int]:
    return mapped_column(Integer, nullable=False, default=0)


class Symptom(EntryMixin, Base):
    __tablename__ = "symptoms"

    appetite_loss: Mapped[int] = _intensity()
    fever: Mapped[int] = _intensity()
    cough: Mapped[int] = _intensity()
    sore_throat: Mapped[int] = _intensity()
    nasal_symptom: Mapped[int] = _intensity()
    nasal_symptom_description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sneezing: Mapped[int] = _intensity()
    heart_burn: Mapped[int] = _intensity()
    abdominal_pain: Mapped[int] = _intensity()
    abdominal_pain_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    diarrhea: Mapped[int] = _intensity()
    constipation: Mapped[int] = _intensity()
    lower_back_pain: Mapped[int] = _intensity()
    upper_back_pain: Mapped[int] = _intensity()
    neck_pain: Mapped[int] = _intensity()
    joint_pain: Mapped[int] = _intensity()
    headache: Mapped[int] = _intensity()
    nausea: Mapped[int] = _intensity()
    dizziness: Mapped[int] = _intensity()
    stomach_ache: Mapped[int] = _intensity()
    chest_pain: Mapped[int] = _intensity()
    shortness_of_breath: Mapped[int] = _intensity()
    fatigue: Mapped[int] = _intensity()
    anxiety: Mapped[int] = _intensity()
    depression: Mapped[int] = _intensity()
    insomnia: Mapped[int] = _intensity()
    shoulder_pain: Mapped[int] = _intensity()
    hand_pain: Mapped[int] = _intensity()
    foot_pain: Mapped[int] = _intensity()
    wrist_pain: Mapped[int] = _intensity()
    dental_pain: Mapped[int] = _intensity()
    dental_pain_description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    eye_pain: Mapped[int] = _intensity()
    ear_pain: Mapped[int] = _intensity()
    feeling_hot: Mapped[int] = _intensity()
    feeling_cold: Mapped[int] = _intensity()
    feeling_thirsty: Mapped[int] = _intensity()
