from fittrack.db.base import Base

# Импорты моделей, чтобы Alembic их видел
from fittrack.models.user import User  # noqa
from fittrack.models.user_profile import UserProfile  # noqa
from fittrack.models.user_goals import UserGoals  # noqa
from fittrack.models.user_preferences import UserPreferences  # noqa
from fittrack.models.meal_log import MealLog  # noqa
from fittrack.models.food_item import FoodItem  # noqa
from fittrack.models.catalog_food import CatalogFood  # noqa
from fittrack.models.weight_log import WeightLog  # noqa
from fittrack.models.chat_interaction import ChatInteraction  # noqa
