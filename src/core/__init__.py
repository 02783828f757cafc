"""
Core Domain Layer - O Hexágono.

Este pacote contém a lógica de negócio pura, sem dependências de frameworks.
Características:
- Zero dependências externas (Django, Celery, etc.)
- 100% testável sem banco de dados
- Agnóstico a infraestrutura

Subpacotes:
- shared: exceções, eventos base, UnitOfWork
- access: papéis, capacidades e escopo
- tickets: máquina de estados, atribuição e ledger
- notifications: fan-out de notificações e caixa de entrada
"""
