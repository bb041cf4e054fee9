from .config import KernelConfig, get_kernel_config, set_kernel_config
from .errors import (
    GeometryError,
    InvalidGeometricObjectError,
    InvalidConstructionError,
    IntersectionCalculationError,
)
from .objects import (
    Circle,
    CircleKind,
    GeometricObject,
    InfiniteLine,
    Line,
    LineKind,
    LineVariant,
    ObjectType,
    Param,
    Point,
    Ray,
    Segment,
)
from .constraints import Constraint, ConstraintKind
from .naming import NameGenerator, SessionContext
from .intersections import IntersectionCalculator, line_line, line_circle, circle_circle
from .factory import GeometryFactory
from .repository import GeometryRepository
from .solver import ConstraintSolver, DependencyEntry, DragMode
from .snap import SnapKind, SnapResolver, SnapResult
from .snapshot import GeometryStateSnapshot, UndoHistory
from .engine import GeometryEngine

__all__ = [
    'KernelConfig',
    'get_kernel_config',
    'set_kernel_config',
    'GeometryError',
    'InvalidGeometricObjectError',
    'InvalidConstructionError',
    'IntersectionCalculationError',
    'Circle',
    'CircleKind',
    'GeometricObject',
    'InfiniteLine',
    'Line',
    'LineKind',
    'LineVariant',
    'ObjectType',
    'Param',
    'Point',
    'Ray',
    'Segment',
    'Constraint',
    'ConstraintKind',
    'NameGenerator',
    'SessionContext',
    'IntersectionCalculator',
    'line_line',
    'line_circle',
    'circle_circle',
    'GeometryFactory',
    'GeometryRepository',
    'ConstraintSolver',
    'DependencyEntry',
    'DragMode',
    'SnapKind',
    'SnapResolver',
    'SnapResult',
    'GeometryStateSnapshot',
    'UndoHistory',
    'GeometryEngine',
]
