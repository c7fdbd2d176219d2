"""LangGraph pipeline for radar map reprojection: load -> detect -> resample -> clean -> write."""

from langgraph.graph import END, StateGraph

from radarmap.models import PipelineConfig, PipelineState, ProcessingStage
from radarmap.nodes import clean, detect, load, resample, write


def _has_fatal(state: PipelineState, stage: ProcessingStage) -> bool:
    return any(err.stage == stage and not err.recoverable for err in state.errors)


def _route_load(state: PipelineState) -> str:
    if _has_fatal(state, ProcessingStage.LOAD):
        return END
    if state.source is not None and state.stencil is not None:
        return "detect"
    return END


def _route_detect(state: PipelineState) -> str:
    if _has_fatal(state, ProcessingStage.DETECT):
        return END
    if state.calibration is not None:
        return "resample"
    return END


def _route_resample(state: PipelineState) -> str:
    if _has_fatal(state, ProcessingStage.RESAMPLE):
        return END
    if state.resampled is not None:
        return "clean"
    return END


def _route_clean(state: PipelineState) -> str:
    if state.cleaned is not None:
        return "write"
    return END


def create_pipeline():
    graph = StateGraph(PipelineState)

    graph.add_node("load", load)
    graph.add_node("detect", detect)
    graph.add_node("resample", resample)
    graph.add_node("clean", clean)
    graph.add_node("write", write)

    graph.set_entry_point("load")

    graph.add_conditional_edges("load", _route_load, {"detect": "detect", END: END})
    graph.add_conditional_edges("detect", _route_detect, {"resample": "resample", END: END})
    graph.add_conditional_edges("resample", _route_resample, {"clean": "clean", END: END})
    graph.add_conditional_edges("clean", _route_clean, {"write": "write", END: END})
    graph.add_edge("write", END)

    return graph.compile()


def run_pipeline(
    source_path: str,
    output_path: str,
    stencil_path: str,
    earth_center: tuple[float, float],
    config: PipelineConfig | None = None,
) -> PipelineState:
    initial = PipelineState(
        source_path=source_path,
        output_path=output_path,
        stencil_path=stencil_path,
        earth_center=earth_center,
        config=config or PipelineConfig(),
    )
    result = pipeline.invoke(initial)
    return result if isinstance(result, PipelineState) else PipelineState(**result)


pipeline = create_pipeline()
