"""Adapters de entrega de notificações (email e relatório de fechamento)."""
