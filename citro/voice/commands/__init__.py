"""Voice command handlers, one module per area (navigation, events, cart, dashboard, info)."""
