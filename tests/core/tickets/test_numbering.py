from datetime import datetime

from src.core.tickets.numbering import prefixo_do_mes, proximo_numero


def test_primeiro_numero_do_mes():
    assert proximo_numero(datetime(2025, 7, 3), None) == "2025-07-000001"


def test_incrementa_ultimo_numero():
    assert proximo_numero(datetime(2025, 7, 3), "2025-07-000041") == "2025-07-000042"


def test_numero_de_outro_mes_reinicia_sequencia():
    assert proximo_numero(datetime(2025, 8, 1), "2025-07-000099") == "2025-08-000001"


def test_prefixo_com_zero_a_esquerda():
    assert prefixo_do_mes(datetime(2025, 1, 31)) == "2025-01-"
