from vecplot.palette.colormap import (
    ColorMap,
    LinearColorMap,
    RangedColorMap,
    check_range,
    from_palette,
)
from vecplot.palette.moreland import (
    LAB,
    MSH,
    LuminanceMap,
    SmoothDiverging,
    black_body,
    color_to_lab,
    color_to_msh,
    extended_black_body,
    extended_kindlmann,
    kindlmann,
    smooth_blue_red,
    smooth_blue_tan,
    smooth_green_purple,
    smooth_green_red,
    smooth_purple_orange,
)
from vecplot.palette.palette import (
    BLUE,
    CYAN,
    GREEN,
    HSVA,
    MAGENTA,
    RED,
    YELLOW,
    ReversedColorMap,
    complement,
    critical_index,
    heat,
    radial,
    rainbow,
    reverse,
)

__all__ = [
    "BLUE",
    "CYAN",
    "ColorMap",
    "GREEN",
    "HSVA",
    "LAB",
    "LinearColorMap",
    "LuminanceMap",
    "MAGENTA",
    "MSH",
    "RED",
    "RangedColorMap",
    "ReversedColorMap",
    "SmoothDiverging",
    "YELLOW",
    "black_body",
    "color_to_lab",
    "color_to_msh",
    "check_range",
    "complement",
    "critical_index",
    "extended_black_body",
    "extended_kindlmann",
    "from_palette",
    "heat",
    "kindlmann",
    "radial",
    "rainbow",
    "reverse",
    "smooth_blue_red",
    "smooth_blue_tan",
    "smooth_green_purple",
    "smooth_green_red",
    "smooth_purple_orange",
]
