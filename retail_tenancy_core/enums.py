"""
Enums shared by the retail models and schemas.

Values are the strings stored in the database columns.
"""

import enum


class StockMovementTypeEnum(str, enum.Enum):
    """Direction of an inventory movement."""

    ENTRADA = "entrada"
    SAIDA = "saida"
    AJUSTE = "ajuste"


class SaleStatusEnum(str, enum.Enum):
    PENDENTE = "pendente"
    CONCLUIDA = "concluida"
    CANCELADA = "cancelada"


class PaymentStatusEnum(str, enum.Enum):
    PENDENTE = "pendente"
    PAGO = "pago"
    CANCELADO = "cancelado"


class PaymentMethodEnum(str, enum.Enum):
    DINHEIRO = "dinheiro"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    PIX = "pix"
    BOLETO = "boleto"
