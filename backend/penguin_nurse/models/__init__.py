from .users import User
from .sessions import SessionRecord
from .wees import Wee, WeeUrge
from .poos import Poo
from .consumables import Consumable, NestedConsumable
from .consumptions import Consumption, ConsumptionConsumable
from .exercises import Exercise
from .health_metrics import HealthMetric
from .symptoms import Symptom
from .refluxs import Reflux
from .notes import Note
