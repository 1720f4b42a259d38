# tests/conftest.py
import os, sys
from datetime import date

import pytest

# coloca a raiz do projeto (pasta que contém "proposta") primeiro no sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from proposta.settings.config import Settings


@pytest.fixture
def valid_input():
    return {
        "numeroProposta": "2023-PT-1-01",
        "dataProposta": date(2025, 1, 1),
        "nomeCliente": "ACME",
        "localPrestacao": "Usina X",
        "objetivoCliente": "fornecer manutenção",
        "servicosEspecializados": "manutenção preventiva",
        "escopoFornecimento": "troca de rotores e revisão geral do sistema",
        "prazoExecucao": "30 dias",
        "itensPrecos": [
            {"quantidade": "01", "descricao": "Serviço de revisão", "valorTotal": "1.000,00"},
        ],
    }


@pytest.fixture
def fast_settings(tmp_path):
    return Settings(submit_delay_seconds=0, log_dir=tmp_path / "logs", debug=False)
