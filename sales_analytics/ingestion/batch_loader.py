"""
Batch Warehouse Loader

Reads the star schema tables (sales fact, customer and product dimensions)
from CSV or Parquet exports into polars frames.
Supports:
- Per-table file configuration
- Null marker handling and date parsing
- File hashing for audit logging
- Writing a warehouse snapshot back to disk
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from sales_analytics.config import get_settings
from .schema import coerce_customers, coerce_products, coerce_sales
from .warehouse import Warehouse, WarehouseTable

logger = structlog.get_logger(__name__)
settings = get_settings()


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    PARQUET = "parquet"


class LoadStatus(str, Enum):
    """Table load status"""
    COMPLETED = "completed"
    FAILED = "failed"


_COERCERS: Dict[WarehouseTable, Callable[[pl.DataFrame], pl.DataFrame]] = {
    WarehouseTable.FACT_SALES: coerce_sales,
    WarehouseTable.DIM_CUSTOMERS: coerce_customers,
    WarehouseTable.DIM_PRODUCTS: coerce_products,
}


@dataclass
class TableFileConfig:
    """Configuration for loading one warehouse table"""
    file_path: Union[str, Path]
    table: WarehouseTable
    file_format: FileFormat = FileFormat.CSV
    delimiter: str = ","
    encoding: str = "utf8"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])


class LoadResult(BaseModel):
    """Result of a table load"""
    file_path: str
    table: WarehouseTable
    status: LoadStatus
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


class BatchLoader:
    """
    Loader for file-based warehouse exports.

    Example:
        loader = BatchLoader()
        warehouse = loader.load_warehouse("data/gold")
    """

    def __init__(
        self,
        warehouse_path: Optional[str] = None,
        file_format: Optional[FileFormat] = None,
    ):
        self.warehouse_path = Path(warehouse_path or settings.data_lake.warehouse_path)
        self.file_format = file_format or FileFormat(settings.data_lake.default_format)
        self.results: List[LoadResult] = []

    @staticmethod
    def file_stem(table: WarehouseTable) -> str:
        """File name (without extension) configured for a table"""
        stems = {
            WarehouseTable.FACT_SALES: settings.data_lake.fact_sales_file,
            WarehouseTable.DIM_CUSTOMERS: settings.data_lake.dim_customers_file,
            WarehouseTable.DIM_PRODUCTS: settings.data_lake.dim_products_file,
        }
        return stems[table]

    def table_config(
        self,
        table: WarehouseTable,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
    ) -> TableFileConfig:
        fmt = file_format or self.file_format
        directory = Path(directory or self.warehouse_path)
        return TableFileConfig(
            file_path=directory / f"{self.file_stem(table)}.{fmt.value}",
            table=table,
            file_format=fmt,
        )

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit logging"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: TableFileConfig) -> pl.DataFrame:
        """Read every column as text; typing happens during coercion"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            infer_schema_length=0,
        )

    def _read_parquet(self, config: TableFileConfig) -> pl.DataFrame:
        return pl.read_parquet(config.file_path)

    def _read_file(self, config: TableFileConfig) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(config.file_format)
        if not reader:
            raise ValueError(f"Unsupported file format: {config.file_format}")
        return reader(config)

    def read_table(self, config: TableFileConfig) -> Tuple[pl.DataFrame, LoadResult]:
        """
        Read and coerce one table.

        Raises:
            FileNotFoundError: the file does not exist
            SchemaValidationError: a required column is missing
        """
        file_path = Path(config.file_path)
        started_at = datetime.utcnow()

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_hash = self._compute_file_hash(file_path)
        df = _COERCERS[config.table](self._read_file(config))
        completed_at = datetime.utcnow()

        result = LoadResult(
            file_path=str(file_path),
            table=config.table,
            status=LoadStatus.COMPLETED,
            rows_loaded=len(df),
            load_duration_seconds=(completed_at - started_at).total_seconds(),
            started_at=started_at,
            completed_at=completed_at,
            file_hash=file_hash,
        )
        logger.info(
            "Table loaded",
            table=config.table.value,
            rows=len(df),
            file=str(file_path),
        )
        return df, result

    def load_table(self, config: TableFileConfig) -> Tuple[Optional[pl.DataFrame], LoadResult]:
        """
        Load one table, reporting failures in the result instead of raising.

        Returns:
            The coerced frame (None on failure) and its LoadResult
        """
        started_at = datetime.utcnow()
        try:
            df, result = self.read_table(config)
        except (OSError, ValueError, pl.exceptions.PolarsError) as e:
            completed_at = datetime.utcnow()
            result = LoadResult(
                file_path=str(config.file_path),
                table=config.table,
                status=LoadStatus.FAILED,
                error_message=str(e),
                load_duration_seconds=(completed_at - started_at).total_seconds(),
                started_at=started_at,
                completed_at=completed_at,
            )
            logger.error(
                "Table load failed",
                table=config.table.value,
                error=str(e),
                file=str(config.file_path),
            )
            df = None

        self.results.append(result)
        return df, result

    def load_warehouse(
        self,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
    ) -> Warehouse:
        """
        Load all three warehouse tables from a directory.

        Raises:
            FileNotFoundError: a table file does not exist
            SchemaValidationError: a table lacks a required column
        """
        frames: Dict[WarehouseTable, pl.DataFrame] = {}
        for table in WarehouseTable:
            df, result = self.read_table(self.table_config(table, directory, file_format))
            self.results.append(result)
            frames[table] = df

        warehouse = Warehouse(
            sales=frames[WarehouseTable.FACT_SALES],
            customers=frames[WarehouseTable.DIM_CUSTOMERS],
            products=frames[WarehouseTable.DIM_PRODUCTS],
        )
        logger.info("Warehouse loaded", **warehouse.row_counts)
        return warehouse

    def write_warehouse(
        self,
        warehouse: Warehouse,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
    ) -> List[Path]:
        """Write every warehouse table to `directory`"""
        written = []
        for table in WarehouseTable:
            config = self.table_config(table, directory, file_format)
            path = Path(config.file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            write_frame(warehouse.table(table), path, config.file_format)
            written.append(path)

        logger.info("Warehouse written", files=[str(p) for p in written])
        return written


def write_frame(df: pl.DataFrame, path: Path, file_format: FileFormat) -> None:
    """Write a frame in the given format"""
    if file_format == FileFormat.PARQUET:
        df.write_parquet(path)
    elif file_format == FileFormat.CSV:
        df.write_csv(path, date_format="%Y-%m-%d")
    else:
        raise ValueError(f"Unsupported file format: {file_format}")


def create_batch_loader() -> BatchLoader:
    """Create a BatchLoader from application settings"""
    return BatchLoader(
        warehouse_path=settings.data_lake.warehouse_path,
        file_format=FileFormat(settings.data_lake.default_format),
    )
