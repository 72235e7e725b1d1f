"""server.py
Server to launch a FastAPI / Swagger UI instance over one resume editor session.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from canvas_cv.ats.ats_analyzer import AnalysisOutcome, score_band
from canvas_cv.editor.field_targets import parse_field_path
from canvas_cv.editor_session import EditorSession
from canvas_cv.exceptions import FieldPathError, InvalidBlockDataError, UnsupportedBlockTypeError
from canvas_cv.models import BlockType, Theme
from canvas_cv.rewrite.rewrite_dialog import PRESETS


app = FastAPI(title="CanvasCV Resume Editor API", version="1.0")


# --------------------------------------------------------------
# REQUEST MODELS
# --------------------------------------------------------------
class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddBlockInputs(CamelModel):
    type: BlockType


class UpdateBlockInputs(CamelModel):
    title: Optional[str] = None
    is_visible: Optional[bool] = Field(default=None, alias="isVisible")


class ReorderInputs(CamelModel):
    active_id: str = Field(alias="activeId")
    over_id: str = Field(alias="overId")


class EditFieldInputs(CamelModel):
    field_path: str = Field(alias="fieldPath")
    value: str


class ThemeInputs(CamelModel):
    theme: Theme


class JobDescriptionInputs(CamelModel):
    job_description: str = Field(alias="jobDescription")


class RewriteOpenInputs(CamelModel):
    block_id: str = Field(alias="blockId")
    field_path: str = Field(alias="fieldPath")


class RewriteGenerateInputs(CamelModel):
    preset: Optional[str] = None
    prompt: Optional[str] = None


# Initiate EditorSession for use when server calls
editor_session = EditorSession()


def _require_block(block_id: str):
    block = editor_session.store.get_block(block_id)
    if block is None:
        raise HTTPException(status_code=404, detail=f"Block '{block_id}' not found.")
    return block


def _parse_target(field_path: str):
    try:
        return parse_field_path(field_path)
    except FieldPathError as e:
        raise HTTPException(status_code=422, detail=e.full_message)


# --------------------------------------------------------------
# DOCUMENT
# --------------------------------------------------------------
@app.get("/resume", summary="Full editor state")
async def get_resume() -> Dict[str, Any]:
    return editor_session.store.snapshot()


@app.get("/resume/text", summary="Resume serialized to plain text")
async def get_resume_text() -> Dict[str, str]:
    return {"text": editor_session.store.get_resume_text()}


@app.get("/resume/view", summary="Render view models for every block")
async def get_resume_view() -> Dict[str, Any]:
    view = editor_session.renderer.render().to_dict()
    drag = editor_session.drag
    view["dragging"] = {"activeId": drag.active_id, "overId": drag.over_id}
    return view


# --------------------------------------------------------------
# BLOCKS
# --------------------------------------------------------------
@app.post("/blocks", summary="Append a new block of the given type")
async def add_block(inputs: AddBlockInputs) -> Dict[str, Any]:
    try:
        block = editor_session.store.add_block(inputs.type)
    except UnsupportedBlockTypeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return block.to_dict()


@app.patch("/blocks/{block_id}", summary="Rename a block or change its visibility")
async def update_block(block_id: str, inputs: UpdateBlockInputs) -> Dict[str, Any]:
    _require_block(block_id)
    editor_session.store.update_block(block_id, title=inputs.title, is_visible=inputs.is_visible)
    return editor_session.store.get_block(block_id).to_dict()


@app.delete("/blocks/{block_id}", summary="Remove a block (no-op if absent)")
async def remove_block(block_id: str) -> Dict[str, bool]:
    existed = editor_session.store.get_block(block_id) is not None
    editor_session.store.remove_block(block_id)
    return {"removed": existed}


@app.patch(
    "/blocks/{block_id}/data",
    summary="Shallow-merge fields into a block's data",
    description="List fields such as `items` are replaced wholesale.",
)
async def update_block_data(block_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
    _require_block(block_id)
    try:
        editor_session.store.update_block_data(block_id, partial)
    except InvalidBlockDataError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return editor_session.store.get_block(block_id).to_dict()


@app.post("/blocks/reorder", summary="Move a block to the position of another")
async def reorder_blocks(inputs: ReorderInputs) -> Dict[str, Any]:
    editor_session.store.reorder_blocks(inputs.active_id, inputs.over_id)
    return {"blockIds": editor_session.store.block_ids()}


@app.post("/blocks/{block_id}/activate", summary="Focus a block")
async def activate_block(block_id: str) -> Dict[str, Optional[str]]:
    _require_block(block_id)
    editor_session.store.set_active_block(block_id)
    return {"activeBlockId": block_id}


@app.post(
    "/blocks/{block_id}/fields",
    summary="Edit one field",
    description='`fieldPath` is a payload field ("content") or a list item field ("items[0].description").',
)
async def edit_field(block_id: str, inputs: EditFieldInputs) -> Dict[str, Any]:
    _require_block(block_id)
    target = _parse_target(inputs.field_path)
    applied = editor_session.renderer.edit_field(block_id, target, inputs.value)
    if not applied:
        if editor_session.store.is_heatmap_visible:
            raise HTTPException(status_code=409, detail="Fields are read-only while the heatmap is visible.")
        raise HTTPException(status_code=404, detail=f"Field '{inputs.field_path}' not found.")
    return {"applied": True, "block": editor_session.store.get_block(block_id).to_dict()}


@app.post("/blocks/{block_id}/items", summary="Add a placeholder item to a list block")
async def add_item(block_id: str) -> Dict[str, Any]:
    _require_block(block_id)
    item_id = editor_session.renderer.add_item(block_id)
    if item_id is None:
        raise HTTPException(status_code=422, detail=f"Block '{block_id}' has no items.")
    return {"itemId": item_id, "block": editor_session.store.get_block(block_id).to_dict()}


@app.delete("/blocks/{block_id}/items/{index}", summary="Remove a list item by index")
async def remove_item(block_id: str, index: int) -> Dict[str, Any]:
    _require_block(block_id)
    if not editor_session.renderer.remove_item(block_id, index):
        raise HTTPException(status_code=404, detail=f"Item {index} not found.")
    return editor_session.store.get_block(block_id).to_dict()


# --------------------------------------------------------------
# SETTINGS
# --------------------------------------------------------------
@app.put("/settings/theme", summary="Set the display theme")
async def set_theme(inputs: ThemeInputs) -> Dict[str, str]:
    editor_session.store.set_theme(inputs.theme)
    return {"theme": editor_session.store.theme.value}


@app.patch("/settings/style", summary="Update typography / spacing settings")
async def set_style(partial: Dict[str, str]) -> Dict[str, str]:
    try:
        editor_session.store.set_style_config(**partial)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return editor_session.store.style_config.to_dict()


@app.put("/job-description", summary="Set the target job description")
async def set_job_description(inputs: JobDescriptionInputs) -> Dict[str, str]:
    editor_session.store.set_job_description(inputs.job_description)
    return {"jobDescription": editor_session.store.job_description}


@app.post("/settings/heatmap/toggle", summary="Toggle the read-only heatmap view")
async def toggle_heatmap() -> Dict[str, bool]:
    return {"isHeatmapVisible": editor_session.store.toggle_heatmap()}


@app.post("/settings/suggestions/toggle", summary="Toggle AI autocomplete suggestions")
async def toggle_suggestions() -> Dict[str, bool]:
    return {"isAISuggestionsEnabled": editor_session.store.toggle_ai_suggestions()}


# --------------------------------------------------------------
# ATS ANALYSIS
# --------------------------------------------------------------
@app.post("/ats/analyze", summary="Score the resume against the job description")
async def analyze_resume() -> Dict[str, Any]:
    analyzer = editor_session.analyzer
    if analyzer.is_analyzing:
        raise HTTPException(status_code=409, detail="An analysis is already running.")

    outcome = await analyzer.analyze()
    if outcome == AnalysisOutcome.NEED_JOB_DESCRIPTION:
        raise HTTPException(status_code=400, detail="Please provide a target job description first.")

    analysis = editor_session.store.ats_analysis
    return {
        "outcome": outcome.value,
        "analysis": analysis.to_dict() if analysis else None,
        "scoreBand": score_band(analysis.score) if analysis else None,
    }


@app.get("/ats/keywords", summary="Missing keywords now present in the resume")
async def keyword_progress() -> Dict[str, Any]:
    return editor_session.keyword_progress()


# --------------------------------------------------------------
# SUGGESTIONS
# --------------------------------------------------------------
@app.get("/suggestions/{block_id}/{index}", summary="Autocomplete state of one experience item")
async def get_suggestion(block_id: str, index: int) -> Dict[str, Any]:
    engine = editor_session.suggestion_engine
    return {
        "state": engine.state(block_id, index).value,
        "suggestion": engine.suggestion_for(block_id, index),
    }


@app.post("/suggestions/{block_id}/{index}/accept", summary="Append the shown suggestion")
async def accept_suggestion(block_id: str, index: int) -> Dict[str, bool]:
    return {"accepted": editor_session.suggestion_engine.accept(block_id, index)}


@app.post("/suggestions/{block_id}/{index}/dismiss", summary="Discard the shown suggestion")
async def dismiss_suggestion(block_id: str, index: int) -> Dict[str, bool]:
    return {"dismissed": editor_session.suggestion_engine.dismiss(block_id, index)}


# --------------------------------------------------------------
# REWRITE DIALOG / SUMMARY
# --------------------------------------------------------------
@app.get("/rewrite", summary="Rewrite dialog state")
async def get_rewrite() -> Dict[str, Any]:
    return editor_session.rewrite_dialog.to_dict()


@app.post("/rewrite/open", summary="Open the rewrite dialog on a field")
async def open_rewrite(inputs: RewriteOpenInputs) -> Dict[str, Any]:
    _require_block(inputs.block_id)
    target = _parse_target(inputs.field_path)
    if not editor_session.open_rewrite(inputs.block_id, target):
        raise HTTPException(status_code=404, detail=f"Field '{inputs.field_path}' not found.")
    return editor_session.rewrite_dialog.to_dict()


@app.post(
    "/rewrite/generate",
    summary="Generate one rewrite candidate",
    description="Uses `preset`, else a non-blank `prompt`, else the field's recommended instruction.",
)
async def generate_rewrite(inputs: RewriteGenerateInputs) -> Dict[str, Any]:
    dialog = editor_session.rewrite_dialog
    if not dialog.is_open:
        raise HTTPException(status_code=409, detail="The rewrite dialog is not open.")

    if inputs.preset is not None:
        if inputs.preset not in PRESETS:
            raise HTTPException(status_code=422, detail=f"Unknown preset '{inputs.preset}'. Choices are: {list(PRESETS)}")
        await dialog.generate_preset(inputs.preset)
    elif inputs.prompt is not None:
        if not inputs.prompt.strip():
            raise HTTPException(status_code=422, detail="Custom prompt must not be blank.")
        await dialog.generate_custom(inputs.prompt)
    else:
        await dialog.generate_recommended()
    return dialog.to_dict()


@app.post("/rewrite/apply", summary="Write the candidate into the field")
async def apply_rewrite() -> Dict[str, Any]:
    if not editor_session.rewrite_dialog.apply():
        raise HTTPException(status_code=409, detail="Nothing to apply.")
    return editor_session.rewrite_dialog.to_dict()


@app.post("/rewrite/cancel", summary="Close the dialog without applying")
async def cancel_rewrite() -> Dict[str, Any]:
    editor_session.rewrite_dialog.cancel()
    return editor_session.rewrite_dialog.to_dict()


@app.post("/summary/draft", summary="Draft a professional summary from the resume")
async def draft_summary() -> Dict[str, str]:
    return {"summary": await editor_session.draft_summary()}
