from penguin_nurse.core.db import Base
from penguin_nurse.models.common import EntryMixin


class Note(EntryMixin, Base):
    __tablename__ = "notes"
