from stock_insights.repositories.stock_repo import StockRepository

__all__ = [
    "StockRepository",
]
