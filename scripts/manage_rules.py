import asyncio
import sys
import os
import argparse

# 将项目根目录添加到 python 路径
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from navkeeper.core.errors import InvalidRule
from navkeeper.core.logger import get_logger
from navkeeper.memory.database import db_manager
from navkeeper.memory.repositories import NavigationRuleRepository

logger = get_logger("rule_manager")

async def list_rules(from_view_id: str = None):
    async with db_manager.session_factory() as session:
        repo = NavigationRuleRepository(session)
        if from_view_id:
            records = await repo.find_rules_by_from_location(from_view_id)
        else:
            records = await repo.list_all()

    if not records:
        print("数据库中没有导航规则。")
        return

    print("\n=== 导航规则 ===")
    for r in records:
        action = f" [动作: {r.from_action}]" if r.from_action else ""
        print(f"{r.id:>5}  {r.from_view_id} --({r.condition})--> {r.to_view_id}{action}")
    print("================\n")

async def add_rule(from_view_id: str, to_view_id: str, condition: str, from_action: str = None):
    async with db_manager.session_factory() as session:
        repo = NavigationRuleRepository(session)
        try:
            record = await repo.create(from_view_id, to_view_id, condition, from_action)
        except InvalidRule as e:
            print(f"错误: {e}")
            return
    print(f"已添加规则 id={record.id}")

async def delete_rule(rule_id: int):
    async with db_manager.session_factory() as session:
        repo = NavigationRuleRepository(session)
        if await repo.delete(rule_id):
            print(f"已删除规则 id={rule_id}")
        else:
            print(f"错误: 规则 id={rule_id} 不存在。")

async def main():
    parser = argparse.ArgumentParser(description="NavKeeper 数据库规则管理")
    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    # list
    list_parser = subparsers.add_parser("list", help="列出规则")
    list_parser.add_argument("--from-view", dest="from_view_id", help="只列出该出发视图的规则")

    # add
    add_parser = subparsers.add_parser("add", help="新增规则")
    add_parser.add_argument("from_view_id", help="出发视图")
    add_parser.add_argument("condition", help="匹配的 outcome")
    add_parser.add_argument("to_view_id", help="目标视图")
    add_parser.add_argument("--action", dest="from_action", help="限定的动作标识")

    # delete
    delete_parser = subparsers.add_parser("delete", help="删除规则")
    delete_parser.add_argument("id", type=int, help="规则 ID")

    args = parser.parse_args()

    try:
        if args.command == "list":
            await list_rules(args.from_view_id)
        elif args.command == "add":
            await add_rule(args.from_view_id, args.to_view_id, args.condition, args.from_action)
        elif args.command == "delete":
            await delete_rule(args.id)
        else:
            parser.print_help()
    finally:
        await db_manager.dispose()

if __name__ == "__main__":
    asyncio.run(main())
