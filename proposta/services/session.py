"""
Sessão de edição de uma proposta.

Um único controlador é dono do estado do formulário e é o único que o altera.
Builder e calculadora recebem esse estado como entrada e nunca o modificam.

Fluxo:
  editar campos -> preview() recalcula tudo a cada alteração
  submit()      -> valida; se ok, pausa simulada e guarda a Proposal
  edit()        -> descarta a Proposal e volta ao formulário
  reset()       -> formulário novo
"""
from __future__ import annotations

import asyncio
import copy
import json
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from proposta.core.calculator import ProposalSnapshot, derive
from proposta.schemas.proposal import OPTIONAL_DEFAULTS, Proposal
from proposta.services.logo import LogoUpload, load_logo
from proposta.services.proposal_builder import (
    ProposalValidationError,
    build_proposal,
    collect_errors,
    proposal_to_input,
)
from proposta.settings.config import Settings, settings as default_settings

ITEMS_FIELD = "itensPrecos"
ITEM_FIELDS = ("quantidade", "descricao", "valorTotal")

PROPOSALS_LOG_NAME = "proposals.jsonl"


class ProposalSessionError(ValueError):
    """Operação inválida sobre o formulário (caminho ou índice inexistente)."""


class SubmissionInProgressError(RuntimeError):
    """submit() chamado enquanto outra geração ainda está em andamento."""


def blank_item() -> Dict[str, str]:
    return {"quantidade": "01", "descricao": "", "valorTotal": ""}


def default_input(today: Optional[date] = None) -> Dict[str, Any]:
    """Estado do formulário ao abrir: data de hoje, um item, defaults preenchidos."""
    data: Dict[str, Any] = {
        "logoCliente": "",
        "logoClienteUrl": "",
        "servicosExecutar": "",
        "numeroProposta": "",
        "dataProposta": today or date.today(),
        "nomeCliente": "",
        "localPrestacao": "",
        "objetivoCliente": "",
        "servicosEspecializados": "",
        "dadosTecnicos": "",
        "normasTecnicas": "",
        "escopoFornecimento": "",
        "prazoExecucao": "",
        "textoComplementarPrecos": "",
        ITEMS_FIELD: [blank_item()],
        "solicitante": "",
        "cidade": "",
    }
    data.update(OPTIONAL_DEFAULTS)
    return data


@dataclass
class SessionState:
    values: Dict[str, Any] = field(default_factory=default_input)
    errors: Dict[str, str] = field(default_factory=dict)
    show_preview: bool = False
    is_submitting: bool = False
    proposal: Optional[Proposal] = None
    logo: Optional[LogoUpload] = None


def _append_json_line(path: Path, payload: Dict[str, Any]) -> None:
    """Uma linha JSON por proposta gerada. Falha de escrita não derruba o fluxo."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, default=str)
            f.write("\n")
    except OSError as e:
        print(f"[session] Não foi possível gravar o log {path}: {e}", file=sys.stderr)


class ProposalSession:
    def __init__(self, config: Optional[Settings] = None, initial: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or default_settings
        self.state = SessionState()
        if initial is not None:
            self.state.values.update(copy.deepcopy(dict(initial)))

    # ---- Leitura ------------------------------------------------------------

    @property
    def values(self) -> Dict[str, Any]:
        """Cópia do formulário; quem lê não altera o estado da sessão."""
        return copy.deepcopy(self.state.values)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self.state.values.get(ITEMS_FIELD) or [])

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self.state.errors)

    @property
    def is_submitting(self) -> bool:
        return self.state.is_submitting

    @property
    def proposal(self) -> Optional[Proposal]:
        return self.state.proposal

    def preview(self) -> ProposalSnapshot:
        """
        Snapshot para o renderizador, recalculado do zero a cada chamada.
        Depois do submit usa a Proposal guardada; antes disso, o formulário cru.
        """
        if self.state.proposal is not None:
            return ProposalSnapshot(
                raw=proposal_to_input(self.state.proposal),
                proposal=self.state.proposal,
                derived=derive(self.state.proposal),
            )

        raw = self.values
        try:
            proposal: Optional[Proposal] = build_proposal(raw)
        except ProposalValidationError:
            proposal = None
        return ProposalSnapshot(raw=raw, proposal=proposal, derived=derive(proposal or raw))

    # ---- Edição -------------------------------------------------------------

    def _ensure_editable(self) -> None:
        if self.state.proposal is not None:
            raise ProposalSessionError("Proposta já gerada; use edit() para voltar ao formulário")

    def set_field(self, path: str, value: Any) -> None:
        """
        path: "nomeCliente" ou "itensPrecos.<índice>.<campo>".
        """
        self._ensure_editable()
        parts = path.split(".")

        if parts[0] == ITEMS_FIELD:
            if len(parts) != 3 or parts[2] not in ITEM_FIELDS:
                raise ProposalSessionError(f"Caminho de item inválido: {path}")
            items = self.state.values.setdefault(ITEMS_FIELD, [])
            try:
                index = int(parts[1])
            except ValueError:
                raise ProposalSessionError(f"Índice de item inválido: {path}") from None
            if not 0 <= index < len(items):
                raise ProposalSessionError(f"Item {index} não existe")
            items[index][parts[2]] = value
        elif len(parts) == 1:
            self.state.values[path] = value
        else:
            raise ProposalSessionError(f"Caminho inválido: {path}")

        # Erro some assim que o campo é corrigido
        if self.state.errors:
            self.state.errors = collect_errors(self.state.values)

    def add_item(self) -> int:
        """Novo item no fim da tabela; devolve o índice dele."""
        self._ensure_editable()
        items = self.state.values.setdefault(ITEMS_FIELD, [])
        items.append(blank_item())
        return len(items) - 1

    def remove_item(self, index: int) -> None:
        """
        Remove pela posição atual. Índices não são identidades: depois da
        remoção, todos os itens seguintes sobem uma posição.
        """
        self._ensure_editable()
        items = self.state.values.setdefault(ITEMS_FIELD, [])
        if len(items) <= 1:
            raise ProposalSessionError("A proposta precisa de pelo menos um item")
        if not 0 <= index < len(items):
            raise ProposalSessionError(f"Item {index} não existe")
        del items[index]
        if self.state.errors:
            self.state.errors = collect_errors(self.state.values)

    def upload_logo(self, filename: str, content: bytes, content_type: Optional[str] = None) -> LogoUpload:
        """Só imagens; UnsupportedLogoError mantém o logo anterior."""
        self._ensure_editable()
        logo = load_logo(filename, content, content_type)
        self.state.logo = logo
        self.state.values["logoCliente"] = logo.filename
        self.state.values["logoClienteUrl"] = logo.data_url
        return logo

    def validate(self) -> Dict[str, str]:
        self.state.errors = collect_errors(self.state.values)
        return self.errors

    # ---- Pré-visualização ---------------------------------------------------

    def show_preview(self) -> ProposalSnapshot:
        self.state.show_preview = True
        return self.preview()

    def hide_preview(self) -> None:
        self.state.show_preview = False

    # ---- Geração ------------------------------------------------------------

    async def submit(self) -> Optional[Proposal]:
        """
        Valida e gera a proposta. Erros ficam em self.errors e o retorno é None.
        Durante a pausa simulada, um segundo submit levanta SubmissionInProgressError.
        """
        if self.state.is_submitting:
            raise SubmissionInProgressError("Gerando proposta...")

        try:
            proposal = build_proposal(self.state.values)
        except ProposalValidationError as exc:
            self.state.errors = exc.errors
            return None

        # Só o estado em que o submit começou recebe o resultado
        state = self.state
        state.errors = {}
        state.is_submitting = True
        try:
            await asyncio.sleep(self.config.submit_delay_seconds)
        finally:
            state.is_submitting = False

        state.proposal = proposal
        self._log_generated(proposal)
        return proposal

    def _log_generated(self, proposal: Proposal) -> None:
        derived = derive(proposal)
        event = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "type": "proposal_generated",
            "numeroProposta": proposal.proposal_number,
            "nomeCliente": proposal.client_name,
            "valorTotalGeral": str(derived.grand_total),
            "dataValidade": derived.validity_date.isoformat() if derived.validity_date else None,
        }
        _append_json_line(Path(self.config.log_dir) / PROPOSALS_LOG_NAME, event)
        if self.config.debug:
            print(
                f"[session] Proposta gerada: {proposal.proposal_number} ({proposal.client_name})",
                file=sys.stderr,
            )

    def _ensure_idle(self) -> None:
        if self.state.is_submitting:
            raise SubmissionInProgressError("Gerando proposta...")

    def edit(self) -> Dict[str, Any]:
        """Descarta a proposta gerada e devolve o formulário para edição."""
        self._ensure_idle()
        # O formulário ficou congelado desde o submit; basta soltar a Proposal
        self.state.proposal = None
        self.state.show_preview = False
        return self.values

    def reset(self) -> None:
        """Formulário novo. Não é permitido enquanto uma geração está em andamento."""
        self._ensure_idle()
        self.state = SessionState()
