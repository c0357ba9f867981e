from fastapi import FastAPI, UploadFile, File, HTTPException
from .clean import TableParseError, clean_table_bytes
from .models import CleanOptions, CleanResponse, HealthResponse
from .rules import TABLE_SUFFIX

app = FastAPI(
    title="ct-cleaner",
    description="Repair and shrink Cheat Engine tables",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/clean", response_model=CleanResponse)
async def clean_table(
    file: UploadFile = File(...),
    full: bool = False,
    repair: bool = False,
    compact: bool = False,
    linear_lua: bool = False,
    remove_extra_spaces: bool = False,
    remove_signature: bool = False,
    remove_structures: bool = False,
    remove_user_defined_symbols: bool = False,
    no_linear_xml: bool = False,
):
    if not (file.filename or "").lower().endswith(TABLE_SUFFIX):
        raise HTTPException(status_code=422, detail="Only .CT files are supported")

    flags = dict(
        repair=repair,
        compact=compact,
        linear_lua=linear_lua,
        remove_extra_spaces=remove_extra_spaces,
        remove_signature=remove_signature,
        remove_structures=remove_structures,
        remove_user_defined_symbols=remove_user_defined_symbols,
        no_linear_xml=no_linear_xml,
    )
    options = CleanOptions.full(**flags) if full else CleanOptions(**flags)

    raw = await file.read()
    try:
        return clean_table_bytes(raw, options)
    except TableParseError as e:
        raise HTTPException(status_code=422, detail=f"Table could not be loaded: {e}")
