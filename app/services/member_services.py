from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fastapi import HTTPException
import structlog

from app.core.ids import IdGenerator, uuid_id
from app.core.utils import commit_or_500
from app.models.member import Member
from app.models.payment import Payment
from app.models.split import Split
from app.services.project_services import get_project_or_404

logger = structlog.get_logger(__name__)


async def add_member(db: AsyncSession, project_id: str, data, new_id: IdGenerator = uuid_id):
    await get_project_or_404(db, project_id)

    member = Member(id=new_id(), project_id=project_id, name=data.name)
    db.add(member)

    await commit_or_500(db, "Failed to add member", project_id=project_id)
    await db.refresh(member)
    return member


async def remove_member(db: AsyncSession, project_id: str, member_id: str):
    await get_project_or_404(db, project_id)

    res = await db.execute(
        select(Member).where(
            Member.id == member_id,
            Member.project_id == project_id
        )
    )
    member = res.scalar_one_or_none()

    if not member:
        raise HTTPException(404, "Member not found")

    count_q = select(func.count(Member.id)).where(Member.project_id == project_id)
    if (await db.execute(count_q)).scalar_one() <= 1:
        raise HTTPException(400, "Cannot remove the last member of a project")

    paid_q = select(func.count(Payment.id)).where(Payment.member_id == member_id)
    if (await db.execute(paid_q)).scalar_one() > 0:
        raise HTTPException(
            400,
            "Cannot delete this member because they have paid for expenses. "
            "Please update those transactions first."
        )

    split_q = select(func.count(Split.id)).where(Split.member_id == member_id)
    if (await db.execute(split_q)).scalar_one() > 0:
        raise HTTPException(
            400,
            "Cannot delete this member because they are included in expense splits. "
            "Please update those transactions first."
        )

    await db.delete(member)
    await commit_or_500(db, "Failed to remove member", project_id=project_id, member_id=member_id)
    logger.info("member_removed", project_id=project_id, member_id=member_id)

    return {"status": "member_removed", "id": member_id}
