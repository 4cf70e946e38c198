from typing import Any
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_id_generator
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut, ProjectDetail, MemberCreate, MemberOut
from app.services.project_services import create_project, get_project_detail, list_projects, update_project
from app.services.member_services import add_member, remove_member
from app.services.transfer_services import export_filename, export_project, import_project

router = APIRouter()


@router.get("/", response_model=list[ProjectOut])
async def all_projects(db: AsyncSession = Depends(get_db)):
    return await list_projects(db)


@router.post("/", response_model=ProjectDetail, status_code=201, description="create new project")
async def create_new_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await create_project(db, data, new_id=new_id)


@router.post("/import", status_code=201, description="import an exported project")
async def import_route(
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await import_project(db, payload, new_id=new_id)


@router.get("/{project_id}", response_model=ProjectDetail)
async def project_detail(project_id: str, db: AsyncSession = Depends(get_db)):
    return await get_project_detail(db, project_id)


@router.patch("/{project_id}", response_model=ProjectOut)
async def edit(project_id: str, data: ProjectUpdate, db: AsyncSession = Depends(get_db)):
    return await update_project(db, project_id, data)


@router.get("/{project_id}/export")
async def export_route(project_id: str, db: AsyncSession = Depends(get_db)):
    document = await export_project(db, project_id)
    return JSONResponse(
        content=document.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{export_filename(document.name)}"'},
    )


@router.post("/{project_id}/members", response_model=MemberOut, status_code=201)
async def add_project_member(
    project_id: str,
    data: MemberCreate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await add_member(db, project_id, data, new_id=new_id)


@router.delete("/{project_id}/members/{member_id}")
async def rem_mem(project_id: str, member_id: str, db: AsyncSession = Depends(get_db)):
    return await remove_member(db, project_id, member_id)
