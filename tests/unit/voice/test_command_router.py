"""Tests for voice command routing and the intent handlers behind it.

The router checks confidence, then missing slots, then the caller's role,
and only then runs a handler. Handler failures and timeouts come back as
UNAVAILABLE actions instead of exceptions.
"""

import asyncio
from datetime import date

import pytest

from citro.security.roles import Role
from citro.services import CollaboratorError
from citro.voice.config import VoiceConfig
from citro.voice.models import (
    ActionType,
    DayRef,
    EventRef,
    IntentType,
    ParsedCommand,
    ReplyKey,
    RequestContext,
    ResolvedAction,
    SlotName,
)
from citro.voice.parser.command_router import CommandRouter, create_default_router, required_capability


def make_command(intent: IntentType, confidence: float = 1.0, **slots) -> ParsedCommand:
    return ParsedCommand(
        intent=intent,
        confidence=confidence,
        slots={SlotName(name): value for name, value in slots.items()},
    )


@pytest.fixture
def router(voice_config) -> CommandRouter:
    return create_default_router(voice_config)


# =============================================================================
# Pre-dispatch Checks
# =============================================================================


class TestPreDispatch:
    @pytest.mark.asyncio
    async def test_low_confidence_is_unknown(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.SHOW_EVENTS, confidence=0.2), anonymous_context, services
        )
        assert action.intent == IntentType.UNKNOWN
        assert action.action_type == ActionType.NONE
        assert action.confidence == 0.2
        assert services.events.calls == []

    @pytest.mark.asyncio
    async def test_unknown_intent_short_circuits(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.UNKNOWN, 0.0), anonymous_context, services)
        assert action.intent == IntentType.UNKNOWN
        assert action.confidence == 0.0

    @pytest.mark.asyncio
    async def test_missing_slot_asks_without_io(self, router, services, student_context):
        action = await router.route_command(
            make_command(IntentType.ADD_TO_CART, quantity=2), student_context, services
        )
        assert action.is_clarification
        assert action.reply_key == ReplyKey.CLARIFY
        assert action.payload == {"clarification": True, "missing_slot": "event"}
        assert services.events.calls == []
        assert services.cart.calls == []

    @pytest.mark.asyncio
    async def test_zero_quantity_asks_again(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="codeology"), quantity=None)
        action = await router.route_command(command, student_context, services)

        assert action.is_clarification
        assert action.payload == {"clarification": True, "missing_slot": "quantity"}
        assert services.events.calls == []
        assert services.cart.calls == []

    @pytest.mark.asyncio
    async def test_clarification_comes_before_role_check(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.NAVIGATE_TO), anonymous_context, services)
        assert action.is_clarification
        assert action.payload["missing_slot"] == "page"


# =============================================================================
# Role Gate
# =============================================================================


class TestRoleGate:
    @pytest.mark.asyncio
    async def test_anonymous_dashboard_is_refused(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.SHOW_DASHBOARD), anonymous_context, services)
        assert action.action_type == ActionType.NONE
        assert action.reply_key == ReplyKey.REFUSED
        assert action.payload == {}

    @pytest.mark.asyncio
    async def test_student_dashboard_navigates(self, router, services, student_context):
        action = await router.route_command(make_command(IntentType.SHOW_DASHBOARD), student_context, services)
        assert action.action_type == ActionType.NAVIGATE
        assert action.payload["path"] == "/dashboard"

    @pytest.mark.asyncio
    async def test_navigating_to_dashboard_is_gated_too(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.NAVIGATE_TO, page="/dashboard"), anonymous_context, services
        )
        assert action.reply_key == ReplyKey.REFUSED

    @pytest.mark.asyncio
    async def test_stats_need_admin(self, router, services, student_context, admin_context):
        refused = await router.route_command(make_command(IntentType.QUERY_STATS), student_context, services)
        assert refused.reply_key == ReplyKey.REFUSED
        assert services.dashboard.calls == []

        allowed = await router.route_command(make_command(IntentType.QUERY_STATS), admin_context, services)
        assert allowed.action_type == ActionType.DATA
        assert allowed.payload["data"]["stats"]["total_events"] == 4

    def test_required_capability(self):
        assert required_capability(make_command(IntentType.SHOW_DASHBOARD)) == "dashboard:read"
        assert required_capability(make_command(IntentType.NAVIGATE_TO, page="/events")) is None
        assert required_capability(make_command(IntentType.SHOW_EVENTS)) is None


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_handler_timeout_is_unavailable(self, services, anonymous_context):
        async def slow_handler(command, context, services):
            await asyncio.sleep(1)
            return ResolvedAction.none(command.intent, command.confidence)

        router = CommandRouter(timeout_seconds=0.01)
        router.register(IntentType.SHOW_EVENTS, slow_handler)

        action = await router.route_command(make_command(IntentType.SHOW_EVENTS), anonymous_context, services)
        assert action.action_type == ActionType.NONE
        assert action.reply_key == ReplyKey.UNAVAILABLE
        assert action.intent == IntentType.SHOW_EVENTS

    @pytest.mark.asyncio
    async def test_collaborator_error_is_unavailable(self, services, anonymous_context):
        async def broken_handler(command, context, services):
            raise CollaboratorError("database is locked")

        router = CommandRouter()
        router.register(IntentType.SHOW_EVENTS, broken_handler)

        action = await router.route_command(make_command(IntentType.SHOW_EVENTS), anonymous_context, services)
        assert action.reply_key == ReplyKey.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_missing_handler_is_unavailable(self, services, anonymous_context):
        action = await CommandRouter().route_command(make_command(IntentType.GREETING), anonymous_context, services)
        assert action.reply_key == ReplyKey.UNAVAILABLE

    def test_default_router_covers_every_intent(self, router):
        for intent in IntentType:
            if intent != IntentType.UNKNOWN:
                assert router.has_handler(intent), intent

    def test_default_router_uses_config(self):
        config = VoiceConfig.model_validate(
            {"pipeline": {"confidence_threshold": 0.6, "collaborator_timeout_seconds": 1.5}}
        )
        router = create_default_router(config)
        assert router.confidence_threshold == 0.6
        assert router.timeout_seconds == 1.5


# =============================================================================
# Event Handlers
# =============================================================================


class TestEventHandlers:
    @pytest.mark.asyncio
    async def test_show_events(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.SHOW_EVENTS), anonymous_context, services)
        data = action.payload["data"]
        assert action.action_type == ActionType.DATA
        assert data["count"] == 4
        assert [e["title"] for e in data["events"]][:2] == ["Codeology", "ROBO Race"]
        # Internal columns stay out of the payload
        assert "seats" not in data["events"][0]

    @pytest.mark.asyncio
    async def test_show_events_by_category(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.SHOW_EVENTS, category="cse"), anonymous_context, services
        )
        assert action.payload["data"]["count"] == 1
        assert action.payload["data"]["category"] == "cse"

    @pytest.mark.asyncio
    async def test_show_events_empty(self, router, services, anonymous_context):
        services.events.events = []
        action = await router.route_command(make_command(IntentType.SHOW_EVENTS), anonymous_context, services)
        assert action.reply_key == ReplyKey.EMPTY
        assert action.payload["data"]["events"] == []

    @pytest.mark.asyncio
    async def test_search_events(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.SEARCH_EVENTS, query="robo"), anonymous_context, services
        )
        assert action.payload["data"]["query"] == "robo"
        assert [e["title"] for e in action.payload["data"]["events"]] == ["ROBO Race"]

    @pytest.mark.asyncio
    async def test_event_details_by_name(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.EVENT_WHEN, event=EventRef(name="codeology")), anonymous_context, services
        )
        assert action.payload["data"]["event"]["start_time"] == "2026-04-08T12:00:00"
        assert services.events.calls == [("find_event_by_name", "codeology")]

    @pytest.mark.asyncio
    async def test_event_details_by_page(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.EVENT_PRICE, event=EventRef(event_id=2)), anonymous_context, services
        )
        assert action.payload["data"]["event"]["title"] == "ROBO Race"

    @pytest.mark.asyncio
    async def test_unknown_event_is_not_found(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.EVENT_DETAILS, event=EventRef(name="narnia")), anonymous_context, services
        )
        assert action.action_type == ActionType.NONE
        assert action.reply_key == ReplyKey.NOT_FOUND
        assert action.payload == {"name": "narnia"}

    @pytest.mark.asyncio
    async def test_event_prize(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.EVENT_PRIZE, event=EventRef(name="codeology")), anonymous_context, services
        )
        assert action.payload["data"]["event"]["prize"] == "Total ₹5,000"

    @pytest.mark.asyncio
    async def test_day_events_by_fest_day(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.DAY_EVENTS, day=DayRef(fest_day=1)), anonymous_context, services
        )

        data = action.payload["data"]
        assert data["date"] == "2026-04-08"
        assert data["when"] == "on Day 1 (April 8)"
        assert [e["title"] for e in data["events"]] == ["Codeology", "Pharmathon"]
        assert services.events.calls[0][1].on_date == "2026-04-08"

    @pytest.mark.asyncio
    async def test_last_day(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.DAY_EVENTS, day=DayRef(fest_day=-1)), anonymous_context, services
        )
        assert action.payload["data"]["when"] == "on Day 3 (April 10)"
        assert [e["title"] for e in action.payload["data"]["events"]] == ["Open Mic"]

    @pytest.mark.asyncio
    async def test_day_outside_the_fest(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.DAY_EVENTS, day=DayRef(fest_day=5)), anonymous_context, services
        )

        assert action.reply_key == ReplyKey.NOT_FOUND
        assert action.payload == {"day": "on Day 5", "dates": "April 8 to April 10"}
        assert services.events.calls == []

    @pytest.mark.asyncio
    async def test_calendar_date_before_the_fest(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.DAY_EVENTS, day=DayRef(month=3, day_of_month=1)), anonymous_context, services
        )
        assert action.reply_key == ReplyKey.NOT_FOUND
        assert action.payload["day"] == "on March 1"

    @pytest.mark.asyncio
    async def test_today_uses_the_current_date(self, router, services, anonymous_context, monkeypatch):
        monkeypatch.setattr("citro.voice.commands.event_commands.current_date", lambda: date(2026, 4, 9))
        action = await router.route_command(
            make_command(IntentType.DAY_EVENTS, day=DayRef(offset=0)), anonymous_context, services
        )

        assert action.payload["data"]["when"] == "today (Day 2)"
        assert [e["title"] for e in action.payload["data"]["events"]] == ["ROBO Race"]

    @pytest.mark.asyncio
    async def test_recommend_prefers_featured(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.RECOMMEND_EVENTS), anonymous_context, services)

        assert [e["title"] for e in action.payload["data"]["events"]] == ["Codeology", "ROBO Race"]
        assert services.events.calls[0][1].featured is True

    @pytest.mark.asyncio
    async def test_recommend_without_featured_falls_back(self, router, services, anonymous_context):
        for event in services.events.events:
            event["featured"] = False
        action = await router.route_command(make_command(IntentType.RECOMMEND_EVENTS), anonymous_context, services)

        assert action.payload["data"]["count"] == 4
        assert len(services.events.calls) == 2

    @pytest.mark.asyncio
    async def test_fest_info(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.FEST_INFO), anonymous_context, services)

        data = action.payload["data"]
        assert data["total_events"] == 4
        assert data["fest"]["dates"] == "April 8 to April 10"
        assert data["fest"]["end_date"] == "2026-04-10"


# =============================================================================
# Cart Handlers
# =============================================================================


class TestCartHandlers:
    @pytest.mark.asyncio
    async def test_add_to_cart_sets_quantity(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="codeology"), quantity=2)
        action = await router.route_command(command, student_context, services)

        assert action.directive == "add-to-cart"
        assert action.payload["data"]["cart_item"] == {
            "event_id": 1,
            "title": "Codeology",
            "quantity": 2,
            "ticket_price": 100.0,
        }
        assert services.cart.carts == {"user:u-1": {1: 2}}

    @pytest.mark.asyncio
    async def test_repeating_add_is_safe(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="codeology"), quantity=2)
        first = await router.route_command(command, student_context, services)
        second = await router.route_command(command, student_context, services)

        assert first.to_dict() == second.to_dict()
        assert services.cart.carts == {"user:u-1": {1: 2}}

    @pytest.mark.asyncio
    async def test_add_caps_at_available_seats(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="robo race"), quantity=3)
        action = await router.route_command(command, student_context, services)

        data = action.payload["data"]
        assert data["cart_item"]["quantity"] == 1
        assert data["requested_quantity"] == 3
        assert data["quantity_capped"] is True

    @pytest.mark.asyncio
    async def test_add_sold_out(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="pharmathon"), quantity=1)
        action = await router.route_command(command, student_context, services)

        assert action.reply_key == ReplyKey.SOLD_OUT
        assert action.payload == {"title": "Pharmathon"}
        assert services.cart.calls == []

    @pytest.mark.asyncio
    async def test_add_unlimited_event(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(name="open mic"), quantity=5)
        action = await router.route_command(command, student_context, services)
        assert action.payload["data"]["cart_item"]["quantity"] == 5

    @pytest.mark.asyncio
    async def test_anonymous_add_without_cart_key_only_returns_directive(self, router, services, anonymous_context):
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(event_id=1), quantity=1)
        action = await router.route_command(command, anonymous_context, services)

        assert action.directive == "add-to-cart"
        assert services.cart.calls == []

    @pytest.mark.asyncio
    async def test_anonymous_add_with_session_cart(self, router, services):
        context = RequestContext(current_page="/events/1", cart_session="abc")
        command = make_command(IntentType.ADD_TO_CART, event=EventRef(event_id=1), quantity=1)
        await router.route_command(command, context, services)
        assert services.cart.carts == {"session:abc": {1: 1}}

    @pytest.mark.asyncio
    async def test_remove_item_not_in_cart(self, router, services, student_context):
        command = make_command(IntentType.REMOVE_FROM_CART, event=EventRef(name="codeology"))
        action = await router.route_command(command, student_context, services)
        assert action.reply_key == ReplyKey.NOT_FOUND
        assert action.payload == {"name": "Codeology"}

    @pytest.mark.asyncio
    async def test_remove_item(self, router, services, student_context):
        services.cart.carts = {"user:u-1": {1: 2}}
        command = make_command(IntentType.REMOVE_FROM_CART, event=EventRef(name="codeology"))
        action = await router.route_command(command, student_context, services)

        assert action.directive == "remove-from-cart"
        assert action.payload["data"] == {"event_id": 1, "title": "Codeology"}
        assert services.cart.carts == {"user:u-1": {}}

    @pytest.mark.asyncio
    async def test_check_cart(self, router, services, student_context):
        services.cart.carts = {"user:u-1": {1: 2, 2: 1}}
        action = await router.route_command(make_command(IntentType.CHECK_CART), student_context, services)

        data = action.payload["data"]
        assert data["count"] == 3
        assert data["total"] == 400.0
        assert action.directive is None

    @pytest.mark.asyncio
    async def test_check_cart_anonymous_is_empty(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.CHECK_CART), anonymous_context, services)
        assert action.reply_key == ReplyKey.EMPTY
        assert action.payload["data"]["items"] == []

    @pytest.mark.asyncio
    async def test_clear_cart(self, router, services, student_context):
        services.cart.carts = {"user:u-1": {1: 2, 2: 1}}
        action = await router.route_command(make_command(IntentType.CLEAR_CART), student_context, services)

        assert action.directive == "clear-cart"
        assert action.payload["data"] == {"cleared": 2}

    @pytest.mark.asyncio
    async def test_add_and_checkout(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART_AND_CHECKOUT, event=EventRef(name="codeology"), quantity=2)
        action = await router.route_command(command, student_context, services)

        assert action.directive == "add-to-cart-and-checkout"
        assert action.payload["data"]["path"] == "/checkout"
        assert action.payload["data"]["cart_item"]["quantity"] == 2
        assert services.cart.carts == {"user:u-1": {1: 2}}

    @pytest.mark.asyncio
    async def test_add_and_checkout_sold_out_stays_put(self, router, services, student_context):
        command = make_command(IntentType.ADD_TO_CART_AND_CHECKOUT, event=EventRef(name="pharmathon"))
        action = await router.route_command(command, student_context, services)

        assert action.reply_key == ReplyKey.SOLD_OUT
        assert action.directive is None
        assert services.cart.calls == []


# =============================================================================
# Navigation, Dashboard and Info Handlers
# =============================================================================


class TestOtherHandlers:
    @pytest.mark.asyncio
    async def test_navigate(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.NAVIGATE_TO, page="/events"), anonymous_context, services
        )
        assert action.action_type == ActionType.NAVIGATE
        assert action.payload == {"path": "/events", "label": "the events page"}

    @pytest.mark.asyncio
    async def test_navigate_to_current_page(self, router, services, student_context):
        action = await router.route_command(
            make_command(IntentType.NAVIGATE_TO, page="/events"), student_context, services
        )
        assert action.action_type == ActionType.NONE
        assert action.payload["already_here"] is True

    @pytest.mark.asyncio
    async def test_go_back(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.GO_BACK), anonymous_context, services)
        assert action.payload["path"] == "back"

    @pytest.mark.asyncio
    async def test_my_registrations(self, router, services, student_context):
        services.dashboard.registrations["u-1"] = [{"id": 1, "event_id": 1, "title": "Codeology"}]
        action = await router.route_command(make_command(IntentType.MY_REGISTRATIONS), student_context, services)
        assert action.payload["data"]["count"] == 1
        assert services.dashboard.calls == [("get_user_registrations", "u-1")]

    @pytest.mark.asyncio
    async def test_my_registrations_empty(self, router, services, student_context):
        action = await router.route_command(make_command(IntentType.MY_REGISTRATIONS), student_context, services)
        assert action.reply_key == ReplyKey.EMPTY

    @pytest.mark.asyncio
    async def test_my_registrations_anonymous(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.MY_REGISTRATIONS), anonymous_context, services)
        assert action.reply_key == ReplyKey.REFUSED
        assert services.dashboard.calls == []

    @pytest.mark.asyncio
    async def test_where_am_i_on_event_page(self, router, services):
        context = RequestContext(current_page="/events/2", role=Role.ANONYMOUS)
        action = await router.route_command(make_command(IntentType.WHERE_AM_I), context, services)
        assert action.payload == {"page": "/event", "label": "an event page"}

    @pytest.mark.asyncio
    async def test_what_can_i_do(self, router, services, anonymous_context):
        action = await router.route_command(make_command(IntentType.WHAT_CAN_I_DO), anonymous_context, services)
        assert action.payload["label"] == "the home page"
        assert "browse events" in action.payload["hints"]

    @pytest.mark.asyncio
    async def test_faq_topic(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.FAQ, topic="parking"), anonymous_context, services
        )
        assert action.payload == {"topic": "parking"}

    @pytest.mark.asyncio
    async def test_navigate_to_event(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.NAVIGATE_TO_EVENT, event=EventRef(name="robo race")), anonymous_context, services
        )
        assert action.action_type == ActionType.NAVIGATE
        assert action.payload == {"path": "/events/2", "label": "the ROBO Race page"}

    @pytest.mark.asyncio
    async def test_navigate_to_unknown_event(self, router, services, anonymous_context):
        action = await router.route_command(
            make_command(IntentType.NAVIGATE_TO_EVENT, event=EventRef(name="narnia")), anonymous_context, services
        )
        assert action.reply_key == ReplyKey.NOT_FOUND
        assert action.payload == {"name": "narnia"}

    @pytest.mark.asyncio
    async def test_contact_carries_configured_email(self, services, anonymous_context):
        config = VoiceConfig.model_validate({"fest": {"contact_email": "help@citronics.in"}})
        action = await create_default_router(config).route_command(
            make_command(IntentType.CONTACT), anonymous_context, services
        )
        assert action.payload == {"email": "help@citronics.in"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("intent", [
        IntentType.HOW_ARE_YOU,
        IntentType.COMPLIMENT,
        IntentType.JOKE,
        IntentType.BORED,
    ])
    async def test_small_talk_is_a_plain_reply(self, intent, router, services, anonymous_context):
        action = await router.route_command(make_command(intent), anonymous_context, services)
        assert action.action_type == ActionType.NONE
        assert action.intent == intent
        assert services.events.calls == []
