from .converters import (
    Charset,
    ConversionResult,
    TypeConverter,
    TypeConverterRegistry,
    get_converters,
)

__all__ = [
    "Charset",
    "ConversionResult",
    "TypeConverter",
    "TypeConverterRegistry",
    "get_converters",
]
