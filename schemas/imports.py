# schemas/imports.py
from typing import List

from .base import CamelModel


class ImportResponse(CamelModel):
     success: bool = True
     message: str
     imported: int
     total: int
     errors: List[str]
