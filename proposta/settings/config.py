from pydantic import BaseModel
from dotenv import load_dotenv
from pathlib import Path
import os

load_dotenv()

# Raiz do projeto (pasta que contém "proposta", "templates" e "knowledge")
ROOT = Path(__file__).resolve().parents[2]

class Settings(BaseModel):
    app_name: str = "Proposta Comercial - RTB HYDRO"
    environment: str = os.getenv("ENVIRONMENT", "dev")
    debug: bool = os.getenv("DEBUG", "1") == "1"

    # Pausa artificial antes de confirmar a geração da proposta (segundos)
    submit_delay_seconds: float = float(os.getenv("PROPOSTA_SUBMIT_DELAY", "2.0"))

    log_dir: Path = Path(os.getenv("PROPOSTA_LOG_DIR", str(ROOT / "knowledge" / "logs")))
    template_path: Path = Path(os.getenv("PROPOSTA_TEMPLATE", str(ROOT / "templates" / "proposta.html")))
    company_file: Path = Path(os.getenv("PROPOSTA_COMPANY_FILE", str(ROOT / "knowledge" / "empresa.yaml")))

settings = Settings()
