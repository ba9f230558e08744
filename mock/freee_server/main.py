from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock freee / LINE Server", version="1.0.0")
# Fixture JSON per company: trial_pl_<company>_<year>[_<month>].json, deals_<company>.json, wallet_txns_<company>.json
DATA_DIR = Path(os.environ.get("MOCK_DATA_DIR", Path(__file__).resolve().parent / "data"))
PUSHED_MESSAGES: list[dict] = []


def _load(name: str):
    file = DATA_DIR / name
    if not file.exists():
        return None
    return json.loads(file.read_text(encoding="utf-8"))


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/api/1/reports/trial_pl")
def trial_pl(company_id: int, fiscal_year: int, end_month: int | None = None):
    suffix = f"_{end_month}" if end_month else ""
    data = _load(f"trial_pl_{company_id}_{fiscal_year}{suffix}.json") or _load(f"trial_pl_{company_id}_{fiscal_year}.json")
    if data is None:
        # freee answers 400 for a fiscal year the company does not have
        raise HTTPException(status_code=400, detail="fiscal_year not found")
    return JSONResponse(content=data)

@app.get("/api/1/deals")
def deals(company_id: int, limit: int = 100):
    data = _load(f"deals_{company_id}.json") or {"deals": []}
    return JSONResponse(content={"deals": data["deals"][:limit]})

@app.get("/api/1/wallet_txns")
def wallet_txns(company_id: int, limit: int = 100):
    data = _load(f"wallet_txns_{company_id}.json") or {"wallet_txns": []}
    return JSONResponse(content={"wallet_txns": data["wallet_txns"][:limit]})

@app.post("/v2/bot/message/push")
@app.post("/v2/bot/message/reply")
async def line_sink(request: Request):
    PUSHED_MESSAGES.append(await request.json())
    return {}

@app.get("/sent")
def sent(): return {"messages": PUSHED_MESSAGES}
