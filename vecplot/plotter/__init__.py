from vecplot.plotter.base import DEFAULT_GLYPH_STYLE, DEFAULT_LINE_STYLE, Values, XYs, xy_range
from vecplot.plotter.barchart import BarChart
from vecplot.plotter.boxplot import BoxPlot, BoxSummary, HorizontalBoxPlot, median
from vecplot.plotter.colorbar import ColorBar
from vecplot.plotter.conrec import ContourGrid, GridXYZ, conrec
from vecplot.plotter.contour import Contour, ContourPath, contour_paths
from vecplot.plotter.glyphboxes import GlyphBoxes
from vecplot.plotter.heat import HeatMap
from vecplot.plotter.histogram import Histogram, HistogramBin, bin_points
from vecplot.plotter.line import Line
from vecplot.plotter.scatter import Scatter

__all__ = [
    "BarChart",
    "BoxPlot",
    "BoxSummary",
    "ColorBar",
    "Contour",
    "ContourGrid",
    "ContourPath",
    "DEFAULT_GLYPH_STYLE",
    "DEFAULT_LINE_STYLE",
    "GlyphBoxes",
    "GridXYZ",
    "HeatMap",
    "Histogram",
    "HistogramBin",
    "HorizontalBoxPlot",
    "Line",
    "Scatter",
    "Values",
    "XYs",
    "bin_points",
    "conrec",
    "contour_paths",
    "median",
    "xy_range",
]
