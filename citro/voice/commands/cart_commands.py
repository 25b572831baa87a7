"""Cart voice command handlers.

Cart changes are returned as directives ("add-to-cart",
"add-to-cart-and-checkout", "remove-from-cart", "clear-cart") so the browser can update its own cart state. When the caller
has a cart owner key the server-side cart is changed too. Adding sets the
line quantity instead of incrementing it, so a retried request is harmless.
"""

from __future__ import annotations

import logging

from citro.services import Services
from citro.voice.commands.event_commands import resolve_event
from citro.voice.models import (
    ActionType,
    EventRef,
    ParsedCommand,
    ReplyKey,
    RequestContext,
    ResolvedAction,
    SlotName,
)

logger = logging.getLogger(__name__)


async def handle_add_to_cart(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'add 2 tickets for Codeology to cart'."""
    ref: EventRef = command.get_slot(SlotName.EVENT)
    requested = command.get_slot(SlotName.QUANTITY, 1)

    event = await resolve_event(ref, services)
    if not event:
        return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.NOT_FOUND, name=ref.name)

    quantity = requested
    if event.get("seats"):
        available = event.get("available", 0)
        if available <= 0:
            return ResolvedAction.none(
                command.intent,
                command.confidence,
                reply_key=ReplyKey.SOLD_OUT,
                title=event["title"],
            )
        quantity = min(requested, available)

    cart_item = {
        "event_id": event["id"],
        "title": event["title"],
        "quantity": quantity,
        "ticket_price": event.get("ticket_price", 0.0),
    }

    owner = context.cart_owner
    if owner:
        await services.cart.set_item(owner, event["id"], quantity)
        logger.info(f"Cart {owner}: set event {event['id']} x{quantity}")

    data = {
        "cart_item": cart_item,
        "requested_quantity": requested,
        "quantity_capped": quantity < requested,
    }
    return ResolvedAction.data(command.intent, command.confidence, data, directive="add-to-cart")


async def handle_add_to_cart_and_checkout(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
) -> ResolvedAction:
    """Handle 'add Codeology and checkout': add, then send the browser to checkout."""
    action = await handle_add_to_cart(command, context, services)
    if action.action_type != ActionType.DATA:
        return action

    action.payload["data"]["path"] = "/checkout"
    action.directive = "add-to-cart-and-checkout"
    return action


async def handle_remove_from_cart(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
) -> ResolvedAction:
    """Handle 'remove Codeology from cart'."""
    ref: EventRef = command.get_slot(SlotName.EVENT)

    event = await resolve_event(ref, services)
    if not event:
        return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.NOT_FOUND, name=ref.name)

    owner = context.cart_owner
    if owner:
        removed = await services.cart.remove_item(owner, event["id"])
        if not removed:
            return ResolvedAction.none(
                command.intent,
                command.confidence,
                reply_key=ReplyKey.NOT_FOUND,
                name=event["title"],
            )

    data = {"event_id": event["id"], "title": event["title"]}
    return ResolvedAction.data(command.intent, command.confidence, data, directive="remove-from-cart")


async def handle_check_cart(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle "what's in my cart". Callers without a cart key have an empty cart."""
    owner = context.cart_owner
    items = await services.cart.get_cart(owner) if owner else []

    data = {
        "items": items,
        "count": sum(item["quantity"] for item in items),
        "total": round(sum(item["quantity"] * item["ticket_price"] for item in items), 2),
    }
    reply_key = ReplyKey.OK if items else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)


async def handle_clear_cart(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'clear my cart'."""
    owner = context.cart_owner
    cleared = await services.cart.clear(owner) if owner else 0
    return ResolvedAction.data(command.intent, command.confidence, {"cleared": cleared}, directive="clear-cart")
