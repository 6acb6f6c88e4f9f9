"""
File writing for the fast filter command line.

Writes filtered DataFrames as CSV, TSV or Excel with automatic format
detection and consistent error handling.
"""

import pandas as pd
import logging

from pathlib import Path


logger = logging.getLogger(__name__)


class FileWriterError(Exception):
    """Raised when file writing operations fail."""
    pass


class FileWriter:
    """
    Writes output files in various formats.

    All methods are static for easy use across the command line host.
    """

    # Logical format categories (without dots) - matches FileReader
    EXCEL_FORMATS = {'xlsx', 'xlsm'}
    CSV_FORMATS = {'csv'}
    TSV_FORMATS = {'tsv'}

    ALL_FORMATS = EXCEL_FORMATS | CSV_FORMATS | TSV_FORMATS

    EXTENSION_TO_FORMAT = {
        '.xlsx': 'xlsx',
        '.xlsm': 'xlsm',
        '.csv': 'csv',
        '.tsv': 'tsv',
        '.txt': 'tsv',  # .txt files are written as TSV
    }

    @staticmethod
    def write_file(data, filename, sheet_name='Data', index=False,
                   explicit_format=None, encoding='utf-8', separator=','):
        """
        Write a DataFrame to file with automatic format detection.

        Args:
            data: DataFrame to write
            filename: Output file path
            sheet_name: Sheet name for Excel files (default: 'Data')
            index: Whether to include DataFrame index (default: False)
            explicit_format: Override format detection ('xlsx', 'csv', 'tsv')
            encoding: Text encoding for CSV/TSV files (default: 'utf-8')
            separator: Column separator for CSV files (default: ',')

        Returns:
            Filename

        Raises:
            FileWriterError: If file writing fails
        """
        try:
            FileWriter._validate_dataframe(data)

            FileWriter._ensure_directory_exists(filename)

            file_format = FileWriter._determine_format(filename, explicit_format)

            if file_format in FileWriter.EXCEL_FORMATS:
                data.to_excel(filename, sheet_name=sheet_name, index=index)
            elif file_format in FileWriter.CSV_FORMATS:
                data.to_csv(filename, index=index, encoding=encoding, sep=separator, lineterminator='\n')
            elif file_format in FileWriter.TSV_FORMATS:
                data.to_csv(filename, index=index, encoding=encoding, sep='\t', lineterminator='\n')
            else:
                raise FileWriterError(f"Unsupported file format: {file_format}")

            logger.info(f"Wrote {len(data)} rows to '{filename}' ({file_format} format)")
            return filename

        except FileWriterError:
            raise
        except Exception as e:
            raise FileWriterError(f"Unexpected error writing file '{filename}': {e}")

    @staticmethod
    def to_csv_text(data, index=False) -> str:
        """Render a DataFrame as CSV text (for writing to stdout)."""
        FileWriter._validate_dataframe(data)
        return data.to_csv(index=index, lineterminator='\n')

    # =============================================================================
    # PRIVATE HELPER METHODS
    # =============================================================================

    @staticmethod
    def _validate_dataframe(data):
        """Validate that data is a proper DataFrame."""
        if not isinstance(data, pd.DataFrame):
            raise FileWriterError(f"Data must be a pandas DataFrame, got: {type(data)}")

        # Empty DataFrames are allowed - just warn
        if data.empty:
            logger.warning("Writing empty DataFrame")

    @staticmethod
    def _ensure_directory_exists(filename):
        """Ensure the output directory exists."""
        Path(filename).parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _determine_format(filename, explicit_format: str):
        """
        Determine logical format from extension or explicit override.

        Returns logical format without dots: 'xlsx', 'csv', 'tsv'.
        """
        if explicit_format:
            explicit_lower = explicit_format.lower()
            if explicit_lower in FileWriter.ALL_FORMATS:
                return explicit_lower
            else:
                raise FileWriterError(f"Unsupported explicit format: {explicit_format}")

        extension = Path(filename).suffix.lower()

        if extension in FileWriter.EXTENSION_TO_FORMAT:
            return FileWriter.EXTENSION_TO_FORMAT[extension]

        raise FileWriterError(
            f"Unknown file extension '{extension}' for '{filename}'. "
            f"Supported extensions: {list(FileWriter.EXTENSION_TO_FORMAT.keys())}"
        )
