from stock_insights.models.stock import Stock  # noqa: F401
