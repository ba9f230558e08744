"""Flex message rendering of the daily report"""

from datetime import date
from typing import Any, Dict, List
from freee_notifier.domain.models import ExpenseItem, MonthlyProgress, Report, TaxEstimate
from freee_notifier.messaging.formatting import (
    format_currency,
    format_percentage,
    growth_icon,
    row,
    separator,
    text,
)

GREEN = "#00c73c"
RED = "#ff4444"
GREY = "#666666"


def monthly_progress_section(progress: MonthlyProgress, fiscal_year: int) -> Dict[str, Any]:
    sales_color = GREEN if progress.sales_growth_rate >= 0 else RED
    return {
        "type": "box",
        "layout": "vertical",
        "contents": [
            text(f"{fiscal_year}年 損益", weight="bold", size="lg", margin="sm"),
            separator(),
            row(
                "💰 売上",
                f"{growth_icon(progress.sales_growth_rate)} {format_percentage(progress.sales_growth_rate)}",
                label_style={"size": "sm"},
                value_style={"color": sales_color, "align": "start"},
                margin="sm",
            ),
            text(format_currency(progress.current_sales), size="xl", weight="bold", align="end"),
            separator(),
            row(
                "💸 経費",
                f"月+{format_currency(progress.monthly_expense_increase)}",
                label_style={"size": "sm"},
                value_style={"color": "#999999", "align": "start"},
                margin="sm",
            ),
            text(format_currency(progress.current_expenses), size="md", weight="bold", align="end"),
            separator(),
            row(
                "📊 利益",
                f"利益率 {progress.profit_margin:.1f}%",
                label_style={"size": "sm", "weight": "bold"},
                value_style={"color": GREEN if progress.profit_margin > 20 else GREY, "align": "start"},
                margin="sm",
            ),
            text(
                format_currency(progress.current_profit),
                size="xl",
                weight="bold",
                align="end",
                color=GREEN if progress.current_profit >= 0 else RED,
            ),
        ],
    }


def expense_breakdown_section(expenses: List[ExpenseItem]) -> Dict[str, Any]:
    title = text("経費内訳", weight="bold", size="sm", margin="sm")
    if not expenses:
        return {
            "type": "box",
            "layout": "vertical",
            "contents": [title, text("経費データがありません", size="xs", color="#999999", margin="sm")],
        }
    return {
        "type": "box",
        "layout": "vertical",
        "contents": [title, separator()]
        + [row(expense.name, format_currency(expense.amount)) for expense in expenses],
    }


def tax_estimate_section(estimate: TaxEstimate) -> Dict[str, Any]:
    contents = [
        text("【参考】所得税", weight="bold", size="sm", margin="sm"),
        separator(),
        row("所得", format_currency(estimate.income), margin="sm"),
        row("課税所得", format_currency(estimate.taxable_income)),
        row(
            "概算所得税",
            format_currency(estimate.estimated_tax),
            label_style={"weight": "bold"},
            value_style={"weight": "bold", "color": RED if estimate.estimated_tax > 0 else GREEN},
            margin="sm",
        ),
        row("税率", f"{estimate.current_rate}%"),
    ]
    if estimate.amount_to_next_bracket is not None and estimate.amount_to_next_bracket > 0:
        contents.append(
            row(f"{estimate.next_rate}%まで経費", f"あと{format_currency(estimate.amount_to_next_bracket)}")
        )
    contents.append(text("※基礎控除+青色申告控除のみ", size="xxs", color="#999999", margin="sm"))
    return {"type": "box", "layout": "vertical", "contents": contents}


def daily_report_bubble(report: Report) -> Dict[str, Any]:
    deal_count = len(report.deals)
    return {
        "type": "bubble",
        "body": {
            "type": "box",
            "layout": "vertical",
            "contents": [
                text("デイリーレポート", weight="bold", size="xl"),
                separator(),
                monthly_progress_section(report.monthly_progress, report.fiscal_year),
                separator(),
                expense_breakdown_section(report.expense_breakdown),
                separator(),
                tax_estimate_section(report.tax_estimate),
                separator(),
                row(
                    "領収書が必要な取引",
                    f"{deal_count}件",
                    label_style={"size": "sm", "weight": "bold"},
                    value_style={"size": "sm", "weight": "bold", "color": RED if deal_count > 0 else GREEN},
                    margin="sm",
                ),
            ],
        },
    }


def daily_report_alt_text(report: Report, today: date) -> str:
    progress = report.monthly_progress
    return (
        f"{today:%Y/%m/%d} 累計売上{format_currency(progress.current_sales)}"
        f"({format_percentage(progress.sales_growth_rate)}) "
        f"利益{format_currency(progress.current_profit)} 要領収書{len(report.deals)}件"
    )


def daily_report_message(report: Report, today: date) -> Dict[str, Any]:
    """Flex message pushed to the user"""
    return {
        "type": "flex",
        "altText": daily_report_alt_text(report, today),
        "contents": daily_report_bubble(report),
    }
