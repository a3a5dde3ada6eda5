"""The production pipeline every workflow is instantiated from."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StepDefinition:
    key: str
    title: str
    description: str
    estimated_duration_minutes: int
    requirements: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    quality_checks: list[str] = field(default_factory=list)


DEFAULT_PIPELINE: tuple[StepDefinition, ...] = (
    StepDefinition(
        key="design-review",
        title="Design Review & Preparation",
        description="Review design files, check specifications, and prepare materials list",
        estimated_duration_minutes=15,
        requirements=["Design files", "Specifications document", "Material requirements"],
        tools=["Design software", "Material calculator"],
        quality_checks=["Design file quality", "Specification completeness", "Material availability"],
    ),
    StepDefinition(
        key="material-prep",
        title="Material Preparation",
        description="Gather and prepare all required materials for production",
        estimated_duration_minutes=30,
        requirements=["Material list", "Inventory access", "Quality materials"],
        tools=["Material handling equipment", "Measuring tools"],
        quality_checks=["Material quality", "Correct quantities", "Color accuracy"],
    ),
    StepDefinition(
        key="setup",
        title="Production Setup",
        description="Set up equipment and workspace for production",
        estimated_duration_minutes=20,
        requirements=["Clean workspace", "Calibrated equipment", "Safety equipment"],
        tools=["Production equipment", "Calibration tools"],
        quality_checks=["Equipment calibration", "Workspace cleanliness", "Safety compliance"],
    ),
    StepDefinition(
        key="production",
        title="Production Process",
        description="Execute the main production process for the order items",
        estimated_duration_minutes=120,
        requirements=["Prepared materials", "Set up equipment", "Production instructions"],
        tools=["Printing equipment", "Cutting tools", "Assembly tools"],
        quality_checks=["Print quality", "Color accuracy", "Dimensional accuracy", "Finish quality"],
    ),
    StepDefinition(
        key="quality-control",
        title="Quality Control",
        description="Perform comprehensive quality inspection of finished products",
        estimated_duration_minutes=25,
        requirements=["Finished products", "Quality standards", "Inspection tools"],
        tools=["Measuring tools", "Color matching tools", "Quality checklist"],
        quality_checks=["Overall quality", "Specification compliance", "Customer requirements", "Packaging readiness"],
    ),
    StepDefinition(
        key="packaging",
        title="Packaging & Labeling",
        description="Package products and prepare for shipping",
        estimated_duration_minutes=15,
        requirements=["Quality-approved products", "Packaging materials", "Shipping labels"],
        tools=["Packaging equipment", "Label printer", "Protective materials"],
        quality_checks=["Packaging integrity", "Correct labeling", "Protection adequacy"],
    ),
)
