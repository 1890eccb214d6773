"""Structural analysis of periodic particle snapshots."""

from .aggregation import AggregationResult, ClusterPartition, aggregation
from .base import Analyzer, StreamingAnalyzer
from .compressibility import VolumeFluctuation
from .histogram import RadialBins
from .moments import (
    PrincipalAxes,
    center_of_mass,
    eigenvalues_3x3,
    eigenvector_3x3,
    inertia_tensor,
    principal_axes,
)
from .pairwise import (
    DistanceDistribution,
    distance_distribution,
    distto,
    mindist,
    nbhood,
    reference_point,
)
from .rdf import (
    RadialDistributionFunction,
    RDFResult,
    rdf,
    rdf_average,
    rdf_average_intermolecular,
)
from .structure_factor import StructureFactor, structure_factor

__all__ = [
    # Base classes
    "Analyzer",
    "StreamingAnalyzer",
    "RadialBins",
    # Pairwise
    "DistanceDistribution",
    "mindist",
    "distance_distribution",
    "reference_point",
    "nbhood",
    "distto",
    # RDF
    "RadialDistributionFunction",
    "RDFResult",
    "rdf",
    "rdf_average",
    "rdf_average_intermolecular",
    # Aggregation
    "AggregationResult",
    "ClusterPartition",
    "aggregation",
    # Moments
    "PrincipalAxes",
    "center_of_mass",
    "inertia_tensor",
    "eigenvalues_3x3",
    "eigenvector_3x3",
    "principal_axes",
    # Structure factor
    "StructureFactor",
    "structure_factor",
    # Thermodynamics
    "VolumeFluctuation",
]
