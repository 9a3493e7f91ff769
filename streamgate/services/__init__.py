"""Access-control services: tokens, credential store, auth flow, guards, subscriptions."""
