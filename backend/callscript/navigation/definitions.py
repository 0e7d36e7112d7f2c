# /callscript/navigation/definitions.py

"""
Bundled script data.

HABITACIONAL_SCRIPT uses the same shape accepted by the admin import
endpoint: ``{"marcas": {PRODUCT: {key: {id, title, body, buttons}}}}``.
A button whose ``next`` is ``"fim"`` ends the call.

HABITACIONAL_TABULATIONS maps step ids to the outcome the operator should
register when the call ends on that step.
"""

from typing import Any, Dict

HABITACIONAL_PRODUCT = "HABITACIONAL"
HABITACIONAL_START_STEP = "hab_abordagem"

HABITACIONAL_TABULATIONS: Dict[str, Dict[str, str]] = {
    "hab_nao_conhece": {"name": "Número Errado", "description": "Contato não conhece o cliente"},
    "hab_faleceu": {"name": "Cliente Falecido", "description": "Informar sobre procedimentos de inventário"},
    "hab_recado": {"name": "Recado Deixado", "description": "Solicitado retorno do cliente"},
    "hab_finalizacao_terceiro": {"name": "Terceiro - Sem Informação", "description": "Terceiro não forneceu informações"},
    "hab_nao_confirmou": {"name": "Recusa de Identificação", "description": "Cliente não confirmou dados"},
    "hab_questiona_origem": {"name": "Dúvida sobre Empresa", "description": "Cliente questionou legitimidade"},
    "hab_pagamento_efetuado": {"name": "Pagamento Já Realizado", "description": "Cliente informou pagamento"},
    "hab_fgts_recusa": {"name": "Recusa de Negociação", "description": "Cliente recusou proposta"},
    "hab_pesquisa_satisfacao_recusa": {"name": "Finalizado - Recusa", "description": "Atendimento finalizado sem acordo"},
    "hab_pesquisa_satisfacao_aceite": {"name": "Acordo Fechado", "description": "Cliente aceitou proposta de pagamento"},
    "hab_pesquisa_satisfacao": {"name": "Finalizado - Informativo", "description": "Atendimento informativo concluído"},
}

HABITACIONAL_SCRIPT: Dict[str, Any] = {
    "marcas": {
        HABITACIONAL_PRODUCT: {
            "abordagem": {
                "id": "hab_abordagem",
                "title": "Abordagem",
                "body": (
                    "Bom dia! Meu nome é [Nome do operador], falo em nome da CAIXA.\n"
                    "Por gentileza, falo com [Primeiro nome do cliente]?"
                ),
                "buttons": [
                    {"label": "É O CLIENTE", "next": "hab_identificacao", "primary": True},
                    {"label": "NÃO É O CLIENTE", "next": "hab_terceiro"},
                    {"label": "NÃO CONHECE", "next": "hab_nao_conhece"},
                ],
            },
            "identificacao": {
                "id": "hab_identificacao",
                "title": "Identificação do Cliente",
                "body": (
                    "[Primeiro nome do cliente], para sua segurança, confirme os três primeiros "
                    "dígitos do seu CPF: [CPF do cliente]."
                ),
                "buttons": [
                    {"label": "CONFIRMOU", "next": "hab_motivo", "primary": True},
                    {"label": "NÃO CONFIRMOU", "next": "hab_nao_confirmou"},
                    {"label": "QUESTIONA ORIGEM", "next": "hab_questiona_origem"},
                    {"label": "VOLTAR", "next": "hab_abordagem"},
                ],
            },
            "motivo": {
                "id": "hab_motivo",
                "title": "Motivo do Contato",
                "body": (
                    "Sr(a). [Nome completo do cliente], identificamos parcelas em atraso no seu "
                    "contrato habitacional. Podemos conversar sobre uma proposta de regularização?"
                ),
                "buttons": [
                    {"label": "OUVIR PROPOSTA", "next": "hab_proposta", "primary": True},
                    {"label": "JÁ PAGOU", "next": "hab_pagamento_efetuado"},
                    {"label": "SOMENTE INFORMAÇÃO", "next": "hab_pesquisa_satisfacao"},
                ],
            },
            "proposta": {
                "id": "hab_proposta",
                "title": "Proposta de Negociação",
                "body": "Apresente as condições disponíveis, incluindo a possibilidade de uso do FGTS.",
                "buttons": [
                    {"label": "ACEITOU", "next": "hab_pesquisa_satisfacao_aceite", "primary": True},
                    {"label": "RECUSOU", "next": "hab_fgts_recusa"},
                    {"label": "VOLTAR", "next": "hab_motivo"},
                ],
            },
            "terceiro": {
                "id": "hab_terceiro",
                "title": "Contato com Terceiro",
                "body": "Pergunte se o contato conhece [Primeiro nome do cliente] e como localizá-lo(a).",
                "buttons": [
                    {"label": "DEIXAR RECADO", "next": "hab_recado", "primary": True},
                    {"label": "CLIENTE FALECEU", "next": "hab_faleceu"},
                    {"label": "NÃO INFORMOU", "next": "hab_finalizacao_terceiro"},
                ],
            },
            "nao_conhece": {
                "id": "hab_nao_conhece",
                "title": "Não Conhece o Cliente",
                "body": "Agradeça a atenção e encerre a ligação.",
                "buttons": [{"label": "FINALIZAR", "next": "fim", "primary": True}],
            },
            "faleceu": {
                "id": "hab_faleceu",
                "title": "Cliente Falecido",
                "body": "Lamente o ocorrido e informe sobre os procedimentos de inventário.",
                "buttons": [{"label": "FINALIZAR", "next": "fim", "primary": True}],
            },
            "recado": {
                "id": "hab_recado",
                "title": "Recado",
                "body": "Solicite que [Primeiro nome do cliente] retorne o contato pelos canais oficiais.",
                "buttons": [{"label": "FINALIZAR", "next": "fim", "primary": True}],
            },
            "finalizacao_terceiro": {
                "id": "hab_finalizacao_terceiro",
                "title": "Finalização com Terceiro",
                "body": "Agradeça a atenção e encerre a ligação.",
                "buttons": [{"label": "FINALIZAR", "next": "fim", "primary": True}],
            },
            "nao_confirmou": {
                "id": "hab_nao_confirmou",
                "title": "Dados Não Confirmados",
                "body": "Informe que, sem a confirmação dos dados, não é possível prosseguir.",
                "buttons": [
                    {"label": "FINALIZAR", "next": "fim", "primary": True},
                    {"label": "VOLTAR", "next": "hab_identificacao"},
                ],
            },
            "questiona_origem": {
                "id": "hab_questiona_origem",
                "title": "Questiona Origem da Ligação",
                "body": "Oriente o cliente a confirmar a ligação pelo Alô CAIXA: 4004 0 104.",
                "buttons": [
                    {"label": "FINALIZAR", "next": "fim", "primary": True},
                    {"label": "VOLTAR", "next": "hab_identificacao"},
                ],
            },
            "pagamento_efetuado": {
                "id": "hab_pagamento_efetuado",
                "title": "Pagamento Já Efetuado",
                "body": "Agradeça e informe que o pagamento será verificado em até 2 dias úteis.",
                "buttons": [{"label": "FINALIZAR", "next": "hab_pesquisa_satisfacao", "primary": True}],
            },
            "fgts_recusa": {
                "id": "hab_fgts_recusa",
                "title": "Recusa da Proposta",
                "body": "Registre o motivo da recusa e agradeça a atenção.",
                "buttons": [{"label": "FINALIZAR", "next": "hab_pesquisa_satisfacao_recusa", "primary": True}],
            },
            "pesquisa_satisfacao": {
                "id": "hab_pesquisa_satisfacao",
                "title": "Pesquisa de Satisfação",
                "body": "[Primeiro nome do cliente], de 1 a 5, como avalia este atendimento?",
                "buttons": [{"label": "ENCERRAR", "next": "fim", "primary": True}],
            },
            "pesquisa_satisfacao_aceite": {
                "id": "hab_pesquisa_satisfacao_aceite",
                "title": "Pesquisa de Satisfação - Acordo",
                "body": "Confirme o acordo e convide o cliente para a pesquisa de satisfação.",
                "buttons": [{"label": "ENCERRAR", "next": "fim", "primary": True}],
            },
            "pesquisa_satisfacao_recusa": {
                "id": "hab_pesquisa_satisfacao_recusa",
                "title": "Pesquisa de Satisfação - Recusa",
                "body": "Convide o cliente para a pesquisa de satisfação.",
                "buttons": [{"label": "ENCERRAR", "next": "fim", "primary": True}],
            },
        }
    }
}
