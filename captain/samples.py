"""Bundled sample hooks for seeding an empty hooks directory."""

from __future__ import annotations

from pydantic import JsonValue

SAMPLE_HOOKS: dict[str, JsonValue] = {
    "github-push": {
        "ref": "refs/heads/main",
        "before": "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
        "after": "0000000000000000000000000000000000000000",
        "repository": {
            "id": 186853002,
            "name": "Hello-World",
            "full_name": "Codertocat/Hello-World",
            "private": False,
        },
        "pusher": {"name": "Codertocat", "email": "21031067+Codertocat@users.noreply.github.com"},
        "commits": [],
    },
    "stripe-payment-intent-succeeded": {
        "id": "evt_3MtwBwLkdIwHu7ix28a3tqPa",
        "object": "event",
        "api_version": "2022-11-15",
        "type": "payment_intent.succeeded",
        "data": {
            "object": {
                "id": "pi_3MtwBwLkdIwHu7ix28a3tqPa",
                "object": "payment_intent",
                "amount": 2000,
                "currency": "usd",
                "status": "succeeded",
            },
        },
        "livemode": False,
    },
    "slack-url-verification": {
        "token": "Jhj5dZrVaK7ZwHHjRyZWjbDl",
        "challenge": "3eZbrw1aBm2rZgRNFdxV2595E9CY3gmdALWMmHkvFXO7tYXAYM8P",
        "type": "url_verification",
    },
}
