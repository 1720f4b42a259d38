from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from proposta.settings.config import settings


@lru_cache(maxsize=4)
def _load_raw_company_yaml(path: str) -> Any:
    """
    Lê knowledge/empresa.yaml uma vez e guarda em cache.
    Arquivo ausente ou YAML quebrado -> {} (o documento sai sem esses blocos).
    """
    p = Path(path)
    if not p.exists():
        print(f"[company] Arquivo de empresa não encontrado: {p}", file=sys.stderr)
        return {}

    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        print(f"[company] YAML inválido em {p}: {e}", file=sys.stderr)
        return {}


def _section(raw: Dict[str, Any], key: str) -> Dict[str, str]:
    value = raw.get(key)
    if not isinstance(value, dict):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _representatives(raw: Dict[str, Any]) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    for rep in raw.get("representantes") or []:
        if not isinstance(rep, dict):
            continue
        out.append({
            "nome": str(rep.get("nome") or ""),
            "funcao": str(rep.get("funcao") or ""),
            "cpf": str(rep.get("cpf") or ""),
        })
    return out


def load_company(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Dados fixos da empresa, normalizados:
      {"empresa": {...}, "dados_bancarios": {...}, "faturamento": str, "representantes": [...]}
    """
    raw = _load_raw_company_yaml(str(path or settings.company_file))
    if not isinstance(raw, dict):
        raw = {}

    return {
        "empresa": _section(raw, "empresa"),
        "dados_bancarios": _section(raw, "dados_bancarios"),
        "faturamento": str(raw.get("faturamento") or ""),
        "representantes": _representatives(raw),
    }
