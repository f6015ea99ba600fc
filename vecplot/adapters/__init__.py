from vecplot.adapters.normalize import grid_from, values_from, xys_from

__all__ = ["grid_from", "values_from", "xys_from"]
