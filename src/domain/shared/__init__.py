"""
Utilidades compartidas del dominio.

Estas funciones son usadas por el clasificador, el estimador y los
adaptadores, y no dependen de ninguna librería externa. Solo operan sobre
tipos nativos de Python.

Uso:
    from src.domain.shared.money import parse_money, parse_money_safe
    from src.domain.shared.month_map import month_to_int
    from src.domain.shared.date_parser import parse_br_date, parse_period_label
    from src.domain.shared.business_days import das_due_date, next_business_day
    from src.domain.shared.text_cleaner import digits_only, normalize_status
    from src.domain.shared.cnpj import normalize_cnpj, format_cnpj
"""
