from typing import Optional

from fastapi import Depends, FastAPI, UploadFile, File, HTTPException, Query
from fastapi.responses import Response

from .convert import convert_rows
from .errors import UnsupportedFormatError
from .models import ConversionOptions, ConversionResult, ConvertResponse, HealthResponse
from .rules import VCARD_MEDIA_TYPE
from .sources import output_filename_for, read_rows

app = FastAPI(
    title="csv2vcard",
    description="Convert contact rows from CSV or Excel files into vCard 4.0 records",
    version="1.0.0",
)


def conversion_options(
    start: Optional[int] = Query(default=None, ge=1, description="1-based index of the first data row"),
    end: Optional[int] = Query(default=None, ge=1, description="1-based index of the last data row"),
    telephone: bool = Query(default=False, description="Format telephone numbers as +CC ZZZ SS SS SS"),
) -> ConversionOptions:
    return ConversionOptions(start=start, end=end, telephone=telephone)


async def _convert_upload(file: UploadFile, delimiter: Optional[str], options: ConversionOptions) -> ConversionResult:
    raw = await file.read()
    try:
        rows = read_rows(raw, file.filename or "", delimiter)
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return convert_rows(rows, options)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/convert", response_model=ConvertResponse)
async def convert(
    file: UploadFile = File(...),
    delimiter: Optional[str] = Query(default=None, min_length=1, max_length=1),
    options: ConversionOptions = Depends(conversion_options),
):
    result = await _convert_upload(file, delimiter, options)
    return {
        "filename": output_filename_for(file.filename or ""),
        "contacts": result.contacts,
        "vcards": result.vcards,
    }


@app.post("/convert.vcf")
async def convert_vcf(
    file: UploadFile = File(...),
    delimiter: Optional[str] = Query(default=None, min_length=1, max_length=1),
    options: ConversionOptions = Depends(conversion_options),
):
    result = await _convert_upload(file, delimiter, options)
    filename = output_filename_for(file.filename or "")
    return Response(
        content=result.vcards,
        media_type=VCARD_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Contacts-Converted": str(result.contacts),
        },
    )
