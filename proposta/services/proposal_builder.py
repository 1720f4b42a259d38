"""
Montagem da proposta: ProposalInput (dict cru do formulário) -> Proposal.

Todas as regras são checadas numa única passada; o erro traz um mapa
caminho-do-campo -> mensagem para que a interface destaque todos os campos
inválidos de uma vez, não só o primeiro.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple

from pydantic import ValidationError

from proposta.schemas.proposal import LineItem, Proposal

# Mensagens quando o valor existe mas não cumpre a regra (vazio, curto, inválido).
# Itens usam "*" no lugar do índice.
RULE_MESSAGES: Dict[str, str] = {
    "numeroProposta": "Número da proposta é obrigatório",
    "dataProposta": "Data da proposta inválida",
    "nomeCliente": "Nome do cliente deve ter pelo menos 2 caracteres",
    "localPrestacao": "Local da prestação é obrigatório",
    "objetivoCliente": "Objetivo com o cliente deve ser especificado",
    "servicosEspecializados": "Serviços especializados devem ser especificados",
    "escopoFornecimento": "Escopo de fornecimento deve ser detalhado",
    "prazoExecucao": "Prazo de execução é obrigatório",
    "itensPrecos": "Pelo menos um item é obrigatório",
    "itensPrecos.*.quantidade": "Quantidade é obrigatória",
    "itensPrecos.*.descricao": "Descrição deve ter pelo menos 5 caracteres",
    "itensPrecos.*.valorTotal": "Valor total é obrigatório",
    "validadeDias": "Validade deve ser um número inteiro de dias",
    "confidencial": "Selecione Sim ou Não",
}

# Mensagens quando a chave nem chegou no formulário
MISSING_MESSAGES: Dict[str, str] = {
    "numeroProposta": "Campo obrigatório: número da proposta",
    "dataProposta": "Data da proposta é obrigatória",
    "nomeCliente": "Campo obrigatório: nome do cliente",
    "localPrestacao": "Campo obrigatório: local da prestação",
    "objetivoCliente": "Campo obrigatório: objetivo com o cliente",
    "servicosEspecializados": "Campo obrigatório: serviços especializados",
    "escopoFornecimento": "Campo obrigatório: escopo de fornecimento",
    "prazoExecucao": "Campo obrigatório: prazo de execução",
    "itensPrecos": "Pelo menos um item é obrigatório",
    "itensPrecos.*.quantidade": "Campo obrigatório: quantidade",
    "itensPrecos.*.descricao": "Campo obrigatório: descrição",
    "itensPrecos.*.valorTotal": "Campo obrigatório: valor total",
}


class ProposalValidationError(ValueError):
    """Uma ou mais regras de campo violadas. errors: caminho -> mensagem."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("Proposta inválida: " + ", ".join(self.errors))


def _field_path(loc: Tuple[Any, ...]) -> Tuple[str, str]:
    """("itensPrecos", 0, "descricao") -> ("itensPrecos.0.descricao", "itensPrecos.*.descricao")"""
    path = ".".join(str(p) for p in loc)
    rule_key = ".".join("*" if isinstance(p, int) else str(p) for p in loc)
    return path, rule_key


def _translate(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        path, rule_key = _field_path(err["loc"])
        if not path:
            # Entrada que nem é um dicionário
            path = rule_key = "__root__"
        if err["type"] == "missing":
            message = MISSING_MESSAGES.get(rule_key, "Campo obrigatório")
        else:
            message = RULE_MESSAGES.get(rule_key, err["msg"])
        # Primeira violação por campo é a que aparece ao lado dele
        errors.setdefault(path, message)
    return errors


def build_proposal(raw: Mapping[str, Any]) -> Proposal:
    """
    Valida o formulário e devolve a Proposal normalizada (defaults aplicados).
    Levanta ProposalValidationError com todas as violações encontradas.
    """
    try:
        return Proposal.model_validate(dict(raw) if isinstance(raw, Mapping) else raw)
    except ValidationError as exc:
        raise ProposalValidationError(_translate(exc)) from exc


def collect_errors(raw: Mapping[str, Any]) -> Dict[str, str]:
    """Mesma validação que build_proposal, mas só devolve o mapa de erros ({} = válido)."""
    try:
        build_proposal(raw)
    except ProposalValidationError as exc:
        return exc.errors
    return {}


def item_to_input(item: LineItem) -> Dict[str, str]:
    return item.model_dump(by_alias=True)


def proposal_to_input(proposal: Proposal) -> Dict[str, Any]:
    """
    Proposal -> campos editáveis com os nomes do formulário.
    Usado pela ação "editar": o formulário volta exatamente com o que foi digitado.
    """
    data = proposal.model_dump(by_alias=True, exclude={"items"})
    data["itensPrecos"] = [item_to_input(i) for i in proposal.items]
    return data
