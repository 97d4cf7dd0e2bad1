"""Renders the custom web pixel module served to Shopify's analytics sandbox.

Loading the module does not subscribe to anything; the sandbox must call the
exported ``init(analytics)``, as the install snippet does.
"""

from __future__ import annotations

import json

DEFAULT_SHOP_ID = "default"
WEBHOOK_PATH = "/webhook/shopify-events"

_JS_UNSAFE_CHARACTERS = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def js_string_literal(value: str) -> str:
    """Return ``value`` as a double-quoted JavaScript string literal.

    The literal evaluates to exactly ``value`` and cannot terminate early, so
    caller-supplied text is safe to splice into generated source.
    """
    literal = json.dumps(value, ensure_ascii=False)
    for character, replacement in _JS_UNSAFE_CHARACTERS.items():
        literal = literal.replace(character, replacement)
    return literal


def render_pixel_script(*, shop_id: str | None, webhook_url: str) -> str:
    shop = js_string_literal(shop_id or DEFAULT_SHOP_ID)
    endpoint = js_string_literal(webhook_url)
    lines = [
        "// Shopify custom pixel script",
        f"const SHOP_ID = {shop};",
        f"const WEBHOOK_URL = {endpoint};",
        "",
        "console.log('Custom pixel script loaded for shop:', SHOP_ID);",
        "",
        "export function init(analytics) {",
        "  console.log('Initializing custom pixel analytics');",
        "",
        "  analytics.subscribe('all_events', (event) => {",
        "    console.log('Shopify event captured:', event.name, event);",
        "",
        "    const payload = {",
        "      timestamp: new Date().toISOString(),",
        "      shop: SHOP_ID,",
        "      eventName: event.name,",
        "      eventData: event,",
        "      customerId: event.customerId || null,",
        "      clientId: event.clientId || null,",
        "      url: event.context?.document?.url || null,",
        "      userAgent: event.context?.navigator?.userAgent || null,",
        "    };",
        "",
        "    fetch(WEBHOOK_URL, {",
        "      method: 'POST',",
        "      headers: { 'Content-Type': 'application/json' },",
        "      body: JSON.stringify(payload),",
        "      keepalive: true,",
        "    }).catch((error) => {",
        "      console.error('Failed to send event to webhook:', error);",
        "    });",
        "  });",
        "",
        "  console.log('Custom pixel initialized successfully');",
        "}",
        "",
    ]
    return "\n".join(lines)
