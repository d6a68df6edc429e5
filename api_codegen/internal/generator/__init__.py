from .printer import GENERATED_FILES, Printer, PythonPrinter

PRINTERS = {
    "python": PythonPrinter,
}

__all__ = ["GENERATED_FILES", "PRINTERS", "Printer", "PythonPrinter"]
