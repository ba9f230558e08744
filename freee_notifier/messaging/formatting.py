"""Number formatting shared by LINE messages"""


def format_currency(amount: int) -> str:
    """¥1,234,567 (negative: -¥1,234)"""
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(amount):,}"


def format_percentage(value: float) -> str:
    """Signed percentage with one decimal: +12.5%, -3.0%, 0.0%"""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


def growth_icon(rate: float) -> str:
    if rate > 10:
        return "📈"
    if rate > 0:
        return "📊"
    if rate == 0:
        return "➡️"
    return "📉"


def text(content: str, **style) -> dict:
    """Flex text component"""
    return {"type": "text", "text": content, **style}


def separator(margin: str = "sm") -> dict:
    return {"type": "separator", "margin": margin}


def row(label: str, value: str, label_style: dict | None = None, value_style: dict | None = None, **box_style) -> dict:
    """Horizontal label/value pair"""
    return {
        "type": "box",
        "layout": "horizontal",
        "contents": [
            text(label, **{"flex": 1, "size": "xs", "color": "#666666", **(label_style or {})}),
            text(value, **{"flex": 0, "size": "xs", "align": "end", **(value_style or {})}),
        ],
        **box_style,
    }
