from datetime import date, datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Valores padrão dos campos opcionais (campo em branco == campo ausente)
OPTIONAL_DEFAULTS = {
    "validadeDias": "30",
    "percentualAssinatura": "25",
    "percentualEventograma": "75",
    "revisao": "01",
    "confidencial": "Sim",
    "elaboradoPor": "RTB HYDRO",
}


class LineItem(BaseModel):
    """
    Uma linha da tabela de preços.
    Exemplo: {"quantidade": "01", "descricao": "Serviço de revisão", "valorTotal": "1.000,00"}
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    quantity: str = Field(alias="quantidade", min_length=1)
    description: str = Field(alias="descricao", min_length=5)
    total_value: str = Field(alias="valorTotal", min_length=1)   # texto em BRL, ex. "1.234,56"


class Proposal(BaseModel):
    """
    Proposta normalizada (pós-validação).

    Os nomes de entrada são os do formulário (numeroProposta, dataProposta, ...);
    os atributos em Python são em inglês. Números continuam como texto de
    exibição: quem precisa do valor numérico usa core.parsing / core.calculator.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    # Identificação
    proposal_number: str = Field(alias="numeroProposta", min_length=1)
    proposal_date: date = Field(alias="dataProposta")
    revision: str = Field(default="01", alias="revisao")
    confidential: Literal["Sim", "Não"] = Field(default="Sim", alias="confidencial")
    prepared_by: str = Field(default="RTB HYDRO", alias="elaboradoPor")

    # Cliente
    client_logo: str = Field(default="", alias="logoCliente")
    client_logo_url: str = Field(default="", alias="logoClienteUrl")
    client_name: str = Field(alias="nomeCliente", min_length=2)
    service_location: str = Field(alias="localPrestacao", min_length=5)
    requester: str = Field(default="", alias="solicitante")
    city: str = Field(default="", alias="cidade")

    # Serviços e escopo
    services_to_execute: str = Field(default="", alias="servicosExecutar")
    client_objective: str = Field(alias="objetivoCliente", min_length=10)
    specialized_services: str = Field(alias="servicosEspecializados", min_length=10)
    technical_data: str = Field(default="", alias="dadosTecnicos")
    technical_standards: str = Field(default="", alias="normasTecnicas")
    supply_scope: str = Field(alias="escopoFornecimento", min_length=20)
    execution_term: str = Field(alias="prazoExecucao", min_length=5)

    # Preços e pagamento
    price_notes: str = Field(default="", alias="textoComplementarPrecos")
    items: List[LineItem] = Field(alias="itensPrecos", min_length=1)
    signature_percent: str = Field(default="25", alias="percentualAssinatura")
    scheduled_percent: str = Field(default="75", alias="percentualEventograma")

    # Validade
    validity_days: str = Field(default="30", alias="validadeDias", pattern=r"^\d+$")

    @field_validator(
        "revision",
        "confidential",
        "prepared_by",
        "signature_percent",
        "scheduled_percent",
        "validity_days",
        mode="before",
    )
    @classmethod
    def _blank_means_default(cls, value, info):
        # Campo opcional em branco recebe o mesmo default de campo ausente
        if value is None or (isinstance(value, str) and not value.strip()):
            alias = cls.model_fields[info.field_name].alias
            return OPTIONAL_DEFAULTS[alias]
        return value

    @field_validator("proposal_date", mode="before")
    @classmethod
    def _calendar_date_only(cls, value):
        # O seletor de data entrega datetime; só o dia importa
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator(
        "client_logo",
        "client_logo_url",
        "requester",
        "city",
        "services_to_execute",
        "technical_data",
        "technical_standards",
        "price_notes",
        mode="before",
    )
    @classmethod
    def _none_means_empty(cls, value):
        return "" if value is None else value
