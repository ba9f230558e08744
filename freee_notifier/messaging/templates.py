"""Static and template messages for webhook commands"""

import math
from typing import Any, Dict, List
from freee_notifier.domain.tax import TAX_BRACKETS, TaxBracket

TAX_FILING_CHECKLIST = """【確定申告チェックリスト】

▼ 収入関連
□ 売上の集計
□ 源泉徴収票の収集

▼ 経費関連
□ 経費の整理・領収書確認
□ 減価償却の計算

▼ 控除証明書
□ 社会保険料控除
□ 生命保険料控除
□ 医療費控除
□ ふるさと納税証明書
□ 住宅ローン控除書類

▼ 申告準備
□ freeeで確定申告書作成
□ マイナンバー確認
□ 還付先口座の確認
□ e-Taxで電子申告
□ 申告データの保存

期限: 3月15日
※青色申告特別控除は3/15必着
※消費税申告（課税事業者）: 3/31"""


def _man_yen(amount: float) -> str:
    return f"{int(amount) // 10_000:,}万円"


def tax_rate_table_text(brackets: List[TaxBracket] = TAX_BRACKETS) -> str:
    """Bracket table rendered from the same data the estimator uses"""
    lines = ["【所得税の税率表】", f"{'課税所得':<12}税率"]
    for index, bracket in enumerate(brackets):
        if math.isinf(bracket.limit):
            label = f"{_man_yen(brackets[index - 1].limit)}〜" if index > 0 else "全額"
        else:
            label = f"〜{_man_yen(bracket.limit)}"
        lines.append(f"{label:<12}{bracket.rate:>3}%")
    lines.append("")
    lines.append("※課税所得 = 所得 - 控除")
    return "\n".join(lines)


def text_message(content: str) -> Dict[str, Any]:
    return {"type": "text", "text": content}


def buttons_message(alt_text: str, title: str, actions: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "template",
        "altText": alt_text,
        "template": {"type": "buttons", "text": title, "actions": actions},
    }


def message_action(label: str) -> Dict[str, Any]:
    """Button that sends its label back as a text command"""
    return {"type": "message", "label": label, "text": label}


def not_linked_message(liff_url: str) -> Dict[str, Any]:
    return buttons_message(
        "アカウント連携されていません",
        "アカウントが連携されていません。「アカウント連携する」を押して連携してください。",
        [{"type": "uri", "label": "アカウント連携する", "uri": liff_url}],
    )


def account_settings_message(linked: bool, liff_url: str) -> Dict[str, Any]:
    if linked:
        action = message_action("アカウント連携解除")
    else:
        action = {"type": "uri", "label": "アカウント連携開始", "uri": liff_url}
    return buttons_message("Account Link", "設定メニュー", [action])


def menu_message() -> Dict[str, Any]:
    return buttons_message(
        "メニュー",
        "メニュー",
        [
            {"type": "message", "label": "デイリーレポート取得", "text": "デイリーレポート"},
            {"type": "message", "label": "領収書が必要な取引", "text": "領収書"},
            message_action("税率表"),
            {"type": "message", "label": "確定申告チェック", "text": "確定申告チェックリスト"},
        ],
    )
