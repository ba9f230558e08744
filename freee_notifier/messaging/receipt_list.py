"""Carousel of deals that still need a receipt"""

from typing import Any, Dict, List
from freee_notifier.domain.models import FlaggedDeal
from freee_notifier.messaging.formatting import format_currency, text

# LINE carousels hold at most 12 bubbles; show 10 deals plus a "more" card
MAX_DEAL_BUBBLES = 10


def deal_bubble(deal: FlaggedDeal) -> Dict[str, Any]:
    contents = [
        text(deal.date.isoformat(), size="sm", color="#999999"),
        text(format_currency(deal.amount), size="xl", weight="bold", margin="sm"),
        text(", ".join(deal.account_item_names), size="xs", color="#666666", margin="sm", wrap=True),
    ]
    if deal.payment_descriptions:
        contents.append(text(" / ".join(deal.payment_descriptions), size="xxs", color="#999999", wrap=True))

    return {
        "type": "bubble",
        "size": "kilo",
        "body": {"type": "box", "layout": "vertical", "contents": contents},
        "footer": {
            "type": "box",
            "layout": "vertical",
            "contents": [
                {
                    "type": "button",
                    "action": {"type": "uri", "label": "freeeで確認", "uri": deal.url},
                    "style": "primary",
                    "color": "#2c67f2",
                    "height": "sm",
                }
            ],
        },
    }


def receipt_list_message(deals: List[FlaggedDeal]) -> Dict[str, Any]:
    """Flex carousel, or a single bubble when nothing is missing"""
    if not deals:
        message = "領収書が必要な取引はありません"
        return {
            "type": "flex",
            "altText": message,
            "contents": {
                "type": "bubble",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "contents": [text(message, size="md", color="#00c73c", weight="bold", align="center")],
                },
            },
        }

    bubbles = [deal_bubble(deal) for deal in deals[:MAX_DEAL_BUBBLES]]
    remaining = len(deals) - MAX_DEAL_BUBBLES
    if remaining > 0:
        bubbles.append(
            {
                "type": "bubble",
                "size": "kilo",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "contents": [
                        text(f"他 {remaining}件", size="lg", weight="bold", align="center"),
                        text("freeeで全件確認してください", size="xs", color="#666666", align="center", margin="sm"),
                    ],
                    "justifyContent": "center",
                    "alignItems": "center",
                },
            }
        )

    return {
        "type": "flex",
        "altText": f"領収書が必要な取引 {len(deals)}件",
        "contents": {"type": "carousel", "contents": bubbles},
    }
