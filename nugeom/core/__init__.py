"""
nugeom 核心模块

该子包包含几何遍历引擎的核心功能模块：
- constants: 单位常数、调试标志和遍历统计
- errors: 异常类型
- data_classes: 数据结构定义（Ray, BoundingBox, Segment, VertexSample）
- isotopes: 同位素编码
- materials: 材料与材料表
- geometry: 三角网格处理和射线求交
- stl_utils: STL文件处理
- shapes: 实体形状
- volumes: 体积层级与导航
- marcher: 射线步进
- path_lengths: 路径长度累计
- sampling: 抽样方法（顶点抽样）
- estimator: 最大路径长度估计
- analyzer: 对外接口
- io_utils: 输入输出工具
"""

# 常数
from .constants import (
    DEBUG,
    DENSITY_UNITS,
    LENGTH_UNITS,
    MARCH_STATS,
    print_march_stats,
    reset_march_stats,
)

# 异常
from .errors import (
    ConfigurationError,
    DegenerateDirectionError,
    GeometryError,
    MarchLimitExceeded,
    MissingMaterialError,
)

# 数据类
from .data_classes import (
    BoundaryStep,
    BoundingBox,
    MeshGeometry,
    Ray,
    Segment,
    VertexSample,
    VertexStatus,
    normalize_direction,
)

# 同位素与材料
from .isotopes import isotope_id, decode_isotope_id, isotope_label
from .materials import Element, Material, MaterialTable

# 几何
from .geometry import (
    prepare_mesh_geometry,
    ray_mesh_intersection,
    point_in_mesh,
    mesh_bounding_box,
)
from .stl_utils import load_stl_mesh
from .shapes import Box, MeshShape, Shape, Sphere, Tube, build_shape
from .volumes import PlacedVolume, Volume, VolumeHierarchy

# 遍历与抽样
from .marcher import march
from .path_lengths import PathLengthList, compute_path_lengths
from .sampling import make_rng, sample_inward_direction, sample_vertex
from .estimator import estimate_max_path_length, estimate_max_path_lengths

# 对外接口
from .analyzer import GeometryAnalyzer, PointGeometryAnalyzer

# IO工具
from .io_utils import (
    build_hierarchy,
    load_geometry,
    read_max_path_lengths_csv,
    write_max_path_lengths_csv,
)

__all__ = [
    # 常数
    'DEBUG',
    'DENSITY_UNITS',
    'LENGTH_UNITS',
    'MARCH_STATS',
    'print_march_stats',
    'reset_march_stats',
    # 异常
    'ConfigurationError',
    'DegenerateDirectionError',
    'GeometryError',
    'MarchLimitExceeded',
    'MissingMaterialError',
    # 数据类
    'BoundaryStep',
    'BoundingBox',
    'MeshGeometry',
    'Ray',
    'Segment',
    'VertexSample',
    'VertexStatus',
    'normalize_direction',
    # 同位素与材料
    'isotope_id',
    'decode_isotope_id',
    'isotope_label',
    'Element',
    'Material',
    'MaterialTable',
    # 几何
    'prepare_mesh_geometry',
    'ray_mesh_intersection',
    'point_in_mesh',
    'mesh_bounding_box',
    'load_stl_mesh',
    'Box',
    'MeshShape',
    'Shape',
    'Sphere',
    'Tube',
    'build_shape',
    'PlacedVolume',
    'Volume',
    'VolumeHierarchy',
    # 遍历与抽样
    'march',
    'PathLengthList',
    'compute_path_lengths',
    'make_rng',
    'sample_inward_direction',
    'sample_vertex',
    'estimate_max_path_length',
    'estimate_max_path_lengths',
    # 对外接口
    'GeometryAnalyzer',
    'PointGeometryAnalyzer',
    # IO
    'build_hierarchy',
    'load_geometry',
    'read_max_path_lengths_csv',
    'write_max_path_lengths_csv',
]
