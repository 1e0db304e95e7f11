"""Import every model so relationship() targets resolve before mappers configure."""
from app.core.database import Base  # noqa
from app.models.user import User  # noqa
from app.models.vehicle import Vehicle  # noqa
from app.models.driver import Driver  # noqa
from app.models.rental import Rental  # noqa
from app.models.invoice import Invoice  # noqa
from app.models.alert import Alert  # noqa
from app.models.toll_charge import TollCharge  # noqa
from app.models.onboarding_token import OnboardingToken  # noqa
from app.models.shift import Shift  # noqa
from app.models.condition_report import ConditionReport  # noqa
from app.models.accident_report import AccidentReport  # noqa

target_metadata = Base.metadata
