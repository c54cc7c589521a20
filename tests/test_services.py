"""
Service layer against an in-memory database.
"""
import asyncio
from datetime import date, datetime

import httpx
import pytest
import pytz

from fittrack.core.errors import AuthError, ConflictError, WebhookError, WebhookNotConfiguredError
from fittrack.core.config import Settings
from fittrack.models.catalog_food import CatalogFood
from fittrack.models.food_item import FoodItem
from fittrack.schemas.goals import GoalsUpdate
from fittrack.schemas.meal import FoodItemCreate, MealLogCreate, QuickAddRequest
from fittrack.schemas.preferences import PreferencesData
from fittrack.schemas.profile import OnboardingRequest
from fittrack.services import chat, food_lookup, meal_logging, profiles, webhooks
from fittrack.services.auth import AuthService, LocalAuthService
from fittrack.services.dashboard import build_dashboard
from fittrack.services.realtime import ChangeFeed, parse_filter
from fittrack.services.webhooks import WebhookClient, build_payload

DAY = date(2026, 3, 14)


def _meal(**overrides):
    data = {
        "meal_type": "lunch",
        "meal_date": DAY,
        "meal_time": "13:00",
        "source": "search",
        "food_items": [
            FoodItemCreate(name="Oatmeal", calories=150, protein=5, carbs=27, fat=3, quantity=2),
            FoodItemCreate(name="Banana", calories=105, protein=1.3, carbs=27, fat=0.4),
        ],
    }
    data.update(overrides)
    return MealLogCreate(**data)


def run(coro):
    return asyncio.run(coro)


# ---------- meal logging ----------


def test_log_meal_totals_use_quantity_and_items_keep_serving_values(db, user):
    meal = meal_logging.log_meal(db, user, _meal())

    assert meal.total_calories == pytest.approx(2 * 150 + 105)
    assert meal.total_protein == pytest.approx(11.3)
    stored = db.query(FoodItem).filter(FoodItem.meal_log_id == meal.id).order_by(FoodItem.id).all()
    assert [(i.name, i.calories, i.quantity) for i in stored] == [
        ("Oatmeal", 150, 2),
        ("Banana", 105, 1),
    ]


def test_quick_add_is_single_item_meal(db, user):
    meal = meal_logging.quick_add(
        db, user, QuickAddRequest(name="Apple", calories=95, meal_date=DAY, meal_time="10:15")
    )
    assert meal.source == "quick_add"
    assert meal.meal_type == "snack"
    assert len(meal.food_items) == 1
    assert meal.total_calories == 95


def test_quick_add_defaults_to_now_in_user_zone(db, user):
    user.timezone = "Pacific/Kiritimati"
    db.commit()
    zone = pytz.timezone("Pacific/Kiritimati")

    before = datetime.now(zone).replace(tzinfo=None, second=0, microsecond=0)
    meal = meal_logging.quick_add(db, user, QuickAddRequest(name="Apple", calories=95))
    after = datetime.now(zone).replace(tzinfo=None)

    logged_at = datetime.combine(meal.meal_date, datetime.strptime(meal.meal_time, "%H:%M").time())
    assert before <= logged_at <= after


def test_day_summary_counts_only_that_day(db, user):
    meal_logging.log_meal(db, user, _meal())
    meal_logging.log_meal(db, user, _meal(meal_date=date(2026, 3, 13)))

    summary = meal_logging.day_summary(db, user, DAY)
    assert summary.total_calories == pytest.approx(405)
    assert len(summary.meals) == 1

    empty = meal_logging.day_summary(db, user, date(2026, 3, 1))
    assert empty.total_calories == 0
    assert empty.meals == []


def test_recent_meal_logs_newest_first(db, user):
    first = meal_logging.log_meal(db, user, _meal(meal_type="breakfast"))
    second = meal_logging.log_meal(db, user, _meal(meal_type="dinner"))
    recent = meal_logging.recent_meal_logs(db, user.id, limit=1)
    assert [m.id for m in recent] == [second.id]
    assert first.id != second.id


# ---------- goals and preferences ----------


def test_upsert_goals_saves_invalid_ratio_sum_with_warning(db, user):
    feed = ChangeFeed()
    events = []
    feed.subscribe("user_goals", f"user_id=eq.{user.id}", events.append)

    goals, check = profiles.upsert_goals(
        db,
        user,
        GoalsUpdate(target_protein_ratio=30, target_carbs_ratio=40, target_fat_ratio=40),
        feed=feed,
    )
    assert goals.target_fat_ratio == 40
    assert goals.target_calories == 2000
    assert not check.valid
    assert check.total == 110
    assert [e["event"] for e in events] == ["INSERT"]

    profiles.upsert_goals(db, user, GoalsUpdate(target_calories=1800), feed=feed)
    assert events[-1]["event"] == "UPDATE"
    assert events[-1]["new"]["target_calories"] == 1800
    # unset fields are kept
    assert events[-1]["new"]["target_fat_ratio"] == 40


def test_goals_fraction_ratios_are_stored_as_percents(db, user):
    goals, check = profiles.upsert_goals(
        db,
        user,
        GoalsUpdate(target_protein_ratio=0.25, target_carbs_ratio=0.45, target_fat_ratio=0.3),
    )
    assert goals.target_protein_ratio == pytest.approx(25)
    assert check.valid


def test_preferences_publish_changes(db, user):
    feed = ChangeFeed()
    events = []
    feed.subscribe("user_preferences", f"user_id=eq.{user.id}", events.append)

    row = profiles.upsert_preferences(db, user, PreferencesData(theme_preference="dark"), feed=feed)
    assert profiles.preferences_data(row).theme_preference == "dark"
    assert events[0]["new"]["preferences"]["theme_preference"] == "dark"


def test_log_weight_updates_profile_and_start_weight(db, user):
    profiles.log_weight(db, user, 80)
    profiles.log_weight(db, user, 78.5)
    assert profiles.first_weight(db, user.id) == 80
    assert sorted(w.weight for w in profiles.list_weight_logs(db, user.id)) == [78.5, 80]


def test_onboarding_seeds_start_weight_once(db, user):
    data = OnboardingRequest(
        full_name="Anna Schmidt",
        age=31,
        gender="female",
        height_cm=168,
        weight_kg=80,
        activity_level="moderately_active",
        goal_type="lose_weight",
        target_weight=70,
    )
    profiles.complete_onboarding(db, user, data)
    profiles.log_weight(db, user, 75)
    profiles.complete_onboarding(db, user, data)

    assert profiles.first_weight(db, user.id) == 80
    assert sorted(w.weight for w in profiles.list_weight_logs(db, user.id)) == [75, 80]
    assert build_dashboard(db, user, reference_date=DAY).weight.percent == pytest.approx(50)


def test_dashboard_for_day(db, user):
    profiles.upsert_goals(db, user, GoalsUpdate(target_calories=2000))
    meal_logging.log_meal(db, user, _meal())

    dashboard = build_dashboard(db, user, reference_date=DAY)
    assert dashboard.totals.calories == pytest.approx(405)
    assert dashboard.calories.percent == pytest.approx(20.25)
    assert len(dashboard.chart) == 7
    assert dashboard.chart[-1].date == DAY
    assert dashboard.chart[-1].calories == pytest.approx(405)
    assert not dashboard.profile_complete


# ---------- change feed ----------


def test_parse_filter():
    assert parse_filter("user_id=eq.7") == ("user_id", "7")
    assert parse_filter(None) is None
    with pytest.raises(ValueError):
        parse_filter("user_id=gt.7")


def test_change_feed_filters_and_unsubscribes():
    feed = ChangeFeed()
    mine, everything = [], []
    unsubscribe = feed.subscribe("user_goals", "user_id=eq.1", mine.append)
    feed.subscribe("user_goals", None, everything.append)

    feed.publish("user_goals", "UPDATE", {"user_id": 1, "target_calories": 1800})
    feed.publish("user_goals", "UPDATE", {"user_id": 2, "target_calories": 2200})
    assert len(mine) == 1
    assert len(everything) == 2

    unsubscribe()
    feed.publish("user_goals", "UPDATE", {"user_id": 1})
    assert len(mine) == 1
    assert feed.subscriber_count("user_goals") == 1


def test_change_feed_listener_error_does_not_stop_delivery():
    feed = ChangeFeed()
    received = []

    def broken(payload):
        raise RuntimeError("boom")

    feed.subscribe("user_preferences", None, broken)
    feed.subscribe("user_preferences", None, received.append)
    assert feed.publish("user_preferences", "INSERT", {"user_id": 1}) == 1
    assert received[0]["table"] == "user_preferences"


# ---------- auth ----------


def test_auth_sign_up_sign_in_sign_out(db, auth):
    events = []
    auth.on_auth_state_change(lambda event, session: events.append(event))

    session = auth.sign_up(db, "Ben@FitTrack.app", "Secret123!")
    assert session.email == "ben@fittrack.app"
    assert auth.email_exists(db, "ben@fittrack.app")

    with pytest.raises(ConflictError):
        auth.sign_up(db, "ben@fittrack.app", "Secret123!")
    with pytest.raises(AuthError):
        auth.sign_in_with_password(db, "ben@fittrack.app", "wrong")

    again = auth.sign_in_with_password(db, "ben@fittrack.app", "Secret123!")
    assert auth.get_session(db, again.access_token).user_id == session.user_id

    auth.sign_out(again.access_token)
    with pytest.raises(AuthError):
        auth.get_session(db, again.access_token)
    assert events == ["SIGNED_IN", "SIGNED_IN", "SIGNED_OUT"]


def test_sign_out_prunes_expired_revocations(db, auth):
    session = auth.sign_up(db, "ida@fittrack.app", "Secret123!")
    auth._revoked["stale"] = 1

    auth.sign_out(session.access_token)
    assert "stale" not in auth._revoked
    assert list(auth._revoked.values()) == [int(session.expires_at.timestamp())]
    with pytest.raises(AuthError):
        auth.get_session(db, session.access_token)


def test_auth_service_requires_every_operation():
    class SignOutOnly(AuthService):
        def sign_out(self, token):
            pass

    with pytest.raises(TypeError):
        SignOutOnly()
    assert isinstance(LocalAuthService(secret_key="s"), AuthService)


# ---------- webhooks ----------


def test_build_payload_envelope():
    payload = build_payload(7, source="meal-logger", meal_type="lunch")
    assert payload["user_id"] == 7
    assert payload["context"] == {"platform": "web", "source": "meal-logger"}
    assert payload["meal_type"] == "lunch"
    assert "created_at" in payload


def test_forward_unconfigured_webhook():
    client = WebhookClient(config=Settings(n8n_chat_webhook_url=None))
    with pytest.raises(WebhookNotConfiguredError):
        run(client.forward(webhooks.CHAT, {}))
    assert run(client.notify(webhooks.CHAT, {})) is None


def test_forward_error_and_text_answers(webhook_client, workflows):
    workflows.respond("/webhook/chat", status_code=500, json_body={"message": "workflow crashed"})
    with pytest.raises(WebhookError) as exc:
        run(webhook_client.forward(webhooks.CHAT, {"user_id": 1}))
    assert exc.value.details == "workflow crashed"

    workflows.respond("/webhook/recommendations", text="plain answer")
    assert run(webhook_client.forward(webhooks.RECOMMENDATIONS, {})) == {"message": "plain answer"}

    workflows.respond("/webhook/onboarding", text="")
    assert run(webhook_client.forward(webhooks.ONBOARDING, {})) == {}


def test_forward_network_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = WebhookClient(
        config=Settings(n8n_meal_log_webhook_url="http://n8n.local/webhook/meal-log"),
        transport=httpx.MockTransport(refuse),
    )
    with pytest.raises(WebhookError):
        run(client.forward(webhooks.MEAL_LOG, {}))
    assert run(client.notify(webhooks.MEAL_LOG, {})) is None


# ---------- chat ----------


def test_process_message_saves_both_sides(db, user, webhook_client, workflows):
    workflows.respond("/webhook/chat", json_body={"message": "Try oatmeal", "metadata": {"intent": "advice"}})

    user_row, bot_row = run(
        chat.process_message(db, user, "What for breakfast?", chat.ChatContext(), webhook_client)
    )
    assert not user_row.is_bot
    assert bot_row.is_bot
    assert bot_row.message == "Try oatmeal"
    assert bot_row.metadata_ == {"intent": "advice"}
    assert [r.id for r in chat.chat_history(db, user.id)] == [user_row.id, bot_row.id]
    assert workflows.payloads("/webhook/chat")[0]["message"] == "What for breakfast?"


def test_bot_text_variants():
    assert chat.bot_text("hi") == "hi"
    assert chat.bot_text([{"output": "from list"}]) == "from list"
    assert chat.bot_text({}) == chat.EMPTY_REPLY


# ---------- food lookup ----------


PRODUCT = {
    "code": "3017620422003",
    "product_name": "Nutella",
    "brands": "Ferrero",
    "nutriments": {"energy-kcal_100g": 539, "proteins_100g": 6.3, "carbohydrates_100g": 57.5, "fat_100g": 30.9},
}


def test_lookup_barcode_caches_openfoodfacts_product(db, off):
    off.products[PRODUCT["code"]] = PRODUCT
    transport = httpx.MockTransport(off)

    first = run(food_lookup.lookup_barcode(db, PRODUCT["code"], transport=transport))
    assert first.found
    assert first.source == "OPENFOODFACTS"
    assert first.food.name == "Nutella (Ferrero)"

    second = run(food_lookup.lookup_barcode(db, PRODUCT["code"], transport=transport))
    assert second.source == "CATALOG"
    assert off.calls == 1


def test_lookup_barcode_reuses_row_cached_meanwhile(db, monkeypatch):
    async def fetch_while_other_request_caches(code, transport=None):
        db.add(CatalogFood(name="Nutella", calories=539, barcode=code))
        db.commit()
        return PRODUCT

    monkeypatch.setattr(food_lookup, "fetch_product_by_barcode", fetch_while_other_request_caches)

    result = run(food_lookup.lookup_barcode(db, PRODUCT["code"]))
    assert result.found
    assert result.source == "CATALOG"
    assert result.food.name == "Nutella"
    assert db.query(CatalogFood).filter(CatalogFood.barcode == PRODUCT["code"]).count() == 1


def test_lookup_barcode_not_found(db, off):
    result = run(food_lookup.lookup_barcode(db, "0000000000000", transport=httpx.MockTransport(off)))
    assert not result.found
    assert result.message == food_lookup.NOT_FOUND_MESSAGE


def test_food_from_openfoodfacts_kj_fallback():
    food = food_lookup.food_from_openfoodfacts({"product_name": "Bread", "nutriments": {"energy_100g": "1046"}})
    assert food.calories == pytest.approx(250, abs=0.1)
    assert food_lookup.food_from_openfoodfacts({"nutriments": {}}) is None
