"""
File reading for the fast filter command line.

Reads CSV, TSV and Excel files into DataFrames with automatic format
detection and consistent error handling.
"""

import pandas as pd
import logging

from pathlib import Path


logger = logging.getLogger(__name__)


class FileReaderError(Exception):
    """Raised when file reading operations fail."""
    pass


class FileReader:
    """
    Reads input files in various formats.

    All methods are static for easy use across the command line host.
    """

    # Logical format categories (without dots)
    EXCEL_FORMATS = {'xlsx', 'xls', 'xlsm'}
    CSV_FORMATS = {'csv'}
    TSV_FORMATS = {'tsv'}

    ALL_FORMATS = EXCEL_FORMATS | CSV_FORMATS | TSV_FORMATS

    # Extension to logical format mapping
    EXTENSION_TO_FORMAT = {
        '.xlsx': 'xlsx',
        '.xls': 'xls',
        '.xlsm': 'xlsm',
        '.csv': 'csv',
        '.tsv': 'tsv',
        '.txt': 'tsv',  # .txt files are processed as TSV
    }

    # Cells that read as missing values
    NA_VALUES = ['', 'NULL', 'null', 'N/A', 'n/a', 'NA', 'None']

    @staticmethod
    def read_file(filename, sheet=1, encoding='utf-8', separator=',', explicit_format=None):
        """
        Read a file with automatic format detection.

        Text files keep every cell as a string exactly as written; the
        filter compares strings, so there is nothing to gain from numeric
        conversion and leading zeros survive.

        Args:
            filename: Path to file
            sheet: Sheet name or 1-based index (1 for first sheet)
            encoding: Text encoding for CSV/TSV files (default: 'utf-8')
            separator: Column separator for CSV files (default: ',')
            explicit_format: Override format detection ('xlsx', 'csv', 'tsv')

        Returns:
            DataFrame with file contents

        Raises:
            FileReaderError: If file reading fails
        """
        try:
            FileReader._validate_file_exists(filename)

            file_format = FileReader._determine_format(filename, explicit_format)

            if file_format in FileReader.EXCEL_FORMATS:
                return FileReader._read_excel_file(filename, sheet)
            elif file_format in FileReader.CSV_FORMATS:
                return FileReader._read_delimited_file(filename, encoding, separator)
            elif file_format in FileReader.TSV_FORMATS:
                return FileReader._read_delimited_file(filename, encoding, '\t')
            else:
                raise FileReaderError(f"Unsupported file format: {file_format}")

        except FileReaderError:
            raise
        except Exception as e:
            raise FileReaderError(f"Unexpected error reading file '{filename}': {e}")

    @staticmethod
    def get_supported_extensions() -> list:
        return list(FileReader.EXTENSION_TO_FORMAT.keys())

    # =============================================================================
    # PRIVATE HELPER METHODS
    # =============================================================================

    @staticmethod
    def _validate_file_exists(filename):
        """Validate that a file exists."""
        file_path = Path(filename)

        if not file_path.exists():
            raise FileReaderError(f"File not found: {filename}")

        if not file_path.is_file():
            raise FileReaderError(f"Path is not a file: {filename}")

    @staticmethod
    def _determine_format(filename, explicit_format: str):
        """
        Determine logical format from extension or explicit override.

        Returns logical format without dots: 'xlsx', 'csv', 'tsv', etc.
        """
        if explicit_format:
            explicit_lower = explicit_format.lower()
            if explicit_lower in FileReader.ALL_FORMATS:
                return explicit_lower
            else:
                raise FileReaderError(f"Unsupported explicit format: {explicit_format}")

        extension = Path(filename).suffix.lower()

        if extension in FileReader.EXTENSION_TO_FORMAT:
            logical_format = FileReader.EXTENSION_TO_FORMAT[extension]
            logger.debug(f"Extension {extension} → logical format {logical_format}")
            return logical_format

        raise FileReaderError(
            f"Unknown file extension '{extension}' for '{filename}'. "
            f"Supported extensions: {FileReader.get_supported_extensions()}"
        )

    @staticmethod
    def _read_excel_file(filename, sheet):
        """Read an Excel sheet (1-based index or sheet name)."""
        if isinstance(sheet, int):
            if sheet < 1:
                raise FileReaderError(
                    f"Sheet index must be 1 or greater, got {sheet}. "
                    "Use 1 for first sheet, 2 for second sheet, etc."
                )
            sheet = sheet - 1

        try:
            data = pd.read_excel(filename, sheet_name=sheet)
        except ValueError as e:
            raise FileReaderError(f"Excel reading error for '{filename}': {e}")

        logger.debug(f"Read Excel file '{filename}', sheet: {sheet}, shape: {data.shape}")
        return data

    @staticmethod
    def _read_delimited_file(filename, encoding, separator):
        """Read a CSV/TSV file with every cell as a string."""
        try:
            data = pd.read_csv(
                filename,
                encoding=encoding,
                sep=separator,
                na_values=FileReader.NA_VALUES,
                keep_default_na=False,
                dtype=str,
                low_memory=False
            )
        except (ValueError, OSError, pd.errors.ParserError) as e:
            raise FileReaderError(f"Delimited file reading error for '{filename}': {e}")

        logger.debug(f"Read delimited file '{filename}', shape: {data.shape}")
        return data
