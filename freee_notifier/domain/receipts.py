"""Deals that need a receipt but have none attached"""

import math
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar
from pydantic import TypeAdapter
from freee_notifier.domain.models import AccountItem, Deal, FlaggedDeal, Payment, WalletTransaction

DEAL_URL_TEMPLATE = "https://secure.freee.co.jp/reports/journals?deal_id={deal_id}&openExternalBrowser=1"

# freee account items whose deals must carry a receipt
DEFAULT_RECEIPT_REQUIRED_ITEMS: List[AccountItem] = [
    AccountItem(name="通信費", id=626477503),
    AccountItem(name="交際費", id=626477505),
    AccountItem(name="消耗品費", id=626477508),
    AccountItem(name="事務用品費", id=626477509),
    AccountItem(name="会議費", id=626477529),
    AccountItem(name="新聞図書費", id=626477530),
    AccountItem(name="雑費", id=626477534),
    AccountItem(name="工具器具備品", id=626477442),
    AccountItem(name="ソフトウェア", id=626477543),
    AccountItem(name="旅費交通費", id=626477502),
    AccountItem(name="租税公課", id=626477498),
]

T = TypeVar("T")

_account_items = TypeAdapter(List[AccountItem])


def load_receipt_required_items(path: str | None = None) -> List[AccountItem]:
    """
    Load the allow-list from a JSON file of {"name", "id"} objects.

    Falls back to DEFAULT_RECEIPT_REQUIRED_ITEMS when no path is configured.

    Raises:
        pydantic.ValidationError: The file is not a list of {"name", "id"} objects
    """
    if not path:
        return list(DEFAULT_RECEIPT_REQUIRED_ITEMS)
    return _account_items.validate_json(Path(path).read_bytes())


def find_wallet_description(payment: Payment, wallet_txns: Sequence[WalletTransaction]) -> Optional[str]:
    """Description of the wallet transaction with the same date, amount and walletable"""
    for txn in wallet_txns:
        if (
            txn.date == payment.date
            and txn.amount == payment.amount
            and txn.walletable_id == payment.from_walletable_id
        ):
            return txn.description
    return None


def filter_flagged_deals(
    deals: Sequence[Deal],
    required_items: Sequence[AccountItem],
    wallet_txns: Optional[Sequence[WalletTransaction]] = None,
    url_template: str = DEAL_URL_TEMPLATE,
) -> List[FlaggedDeal]:
    """
    Select deals that use a receipt-required account item and have no receipt.

    Requirements:
    - Every matching detail contributes its item name (a deal can match several)
    - Unmatched details are dropped from the name list
    - Payments are enriched with wallet transaction descriptions when given
    - Input order is preserved
    """
    names_by_id: Dict[int, str] = {}
    for item in required_items:
        names_by_id.setdefault(item.id, item.name)

    flagged = []
    for deal in deals:
        if deal.receipt_ids:
            continue

        account_item_names = [
            names_by_id[detail.account_item_id]
            for detail in deal.details
            if detail.account_item_id in names_by_id
        ]
        if not account_item_names:
            continue

        descriptions = []
        if wallet_txns:
            for payment in deal.payments:
                description = find_wallet_description(payment, wallet_txns)
                if description is not None:
                    descriptions.append(description)

        flagged.append(
            FlaggedDeal(
                id=deal.id,
                date=deal.issue_date,
                url=url_template.format(deal_id=deal.id),
                amount=deal.amount,
                account_item_names=account_item_names,
                payment_descriptions=descriptions,
            )
        )

    return flagged


def paginate(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], int, int]:
    """
    Slice a 1-based page out of items.

    Returns: (page_items, total_count, total_pages)
    """
    total_count = len(items)
    total_pages = math.ceil(total_count / limit) if limit > 0 else 0
    start = (page - 1) * limit
    return list(items[start:start + limit]), total_count, total_pages
