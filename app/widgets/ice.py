"""
本文件用于通过 STUN 绑定请求收集本机的候选地址描述（host / srflx），供本地 IP 探测使用。
主要函数/类:
- `build_binding_request` / `parse_binding_response`: RFC 5389 报文编解码（仅 IPv4）
- `format_candidate`: 生成候选地址描述行
- `CandidateSource`: 候选地址来源协议
- `StunCandidateSource`: 基于 UDP 的默认实现
"""

from __future__ import annotations

import asyncio
import os
import socket
import struct
from typing import AsyncIterator, List, Optional, Protocol, Sequence, Set, Tuple

from app.core.config import get_settings
from app.core.logger import setup_logger

settings = get_settings()
logger = setup_logger("StunCandidates")

MAGIC_COOKIE = 0x2112A442
BINDING_REQUEST = 0x0001
BINDING_SUCCESS = 0x0101
ATTR_MAPPED_ADDRESS = 0x0001
ATTR_XOR_MAPPED_ADDRESS = 0x0020
FAMILY_IPV4 = 0x01

HOST_PRIORITY = 2122260223
SRFLX_PRIORITY = 1686052607

Address = Tuple[str, int]


def build_binding_request(transaction_id: bytes) -> bytes:
    if len(transaction_id) != 12:
        raise ValueError("transaction_id must be 12 bytes")
    return struct.pack("!HHI", BINDING_REQUEST, 0, MAGIC_COOKIE) + transaction_id


def parse_binding_response(data: bytes, transaction_id: bytes) -> Optional[Address]:
    """
    输入:
    - `data`: 收到的 UDP 报文
    - `transaction_id`: 请求时使用的 12 字节事务 id

    输出:
    - 映射后的 `(ip, port)`；报文不匹配或不含 IPv4 映射地址时返回 None

    作用:
    - 优先使用 XOR-MAPPED-ADDRESS，缺失时退回 MAPPED-ADDRESS
    """

    if len(data) < 20:
        return None
    msg_type, length, cookie = struct.unpack("!HHI", data[:8])
    if msg_type != BINDING_SUCCESS or cookie != MAGIC_COOKIE or data[8:20] != transaction_id:
        return None

    mapped: Optional[Address] = None
    offset = 20
    end = min(len(data), 20 + length)
    while offset + 4 <= end:
        attr_type, attr_len = struct.unpack("!HH", data[offset : offset + 4])
        value = data[offset + 4 : offset + 4 + attr_len]
        if len(value) >= 8 and value[1] == FAMILY_IPV4:
            if attr_type == ATTR_XOR_MAPPED_ADDRESS:
                port = struct.unpack("!H", value[2:4])[0] ^ (MAGIC_COOKIE >> 16)
                raw = struct.unpack("!I", value[4:8])[0] ^ MAGIC_COOKIE
                return socket.inet_ntoa(struct.pack("!I", raw)), port
            if attr_type == ATTR_MAPPED_ADDRESS and mapped is None:
                mapped = socket.inet_ntoa(value[4:8]), struct.unpack("!H", value[2:4])[0]
        # 属性按 4 字节对齐
        offset += 4 + attr_len + (-attr_len % 4)
    return mapped


def format_candidate(
    foundation: int,
    address: Address,
    kind: str,
    priority: int,
    related: Optional[Address] = None,
) -> str:
    line = f"candidate:{foundation} 1 udp {priority} {address[0]} {address[1]} typ {kind}"
    if related:
        line += f" raddr {related[0]} rport {related[1]}"
    return line


class CandidateSource(Protocol):
    @property
    def supported(self) -> bool: ...

    def candidates(self) -> AsyncIterator[str]: ...

    async def close(self) -> None: ...


class _StunProtocol(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()

    def datagram_received(self, data: bytes, addr) -> None:
        self.queue.put_nowait(data)

    def error_received(self, exc: Exception) -> None:
        logger.debug(f"STUN 套接字错误: {exc}")


def _split_server(server: str) -> Address:
    host, _, port = server.rpartition(":")
    if not host:
        return server, 3478
    return host, int(port)


class StunCandidateSource:
    """
    输入:
    - `servers`: `host:port` 形式的 STUN 服务器列表（默认读取配置）
    - `request_timeout`: 单个服务器等待响应的时间（秒）

    输出:
    - 异步迭代的候选地址描述；所有服务器结束后迭代终止

    作用:
    - 每个服务器一个 UDP 端点：本地套接字地址作为 host 候选，绑定响应中的映射地址作为 srflx 候选
    """

    def __init__(self, servers: Optional[Sequence[str]] = None, request_timeout: float = 3.0) -> None:
        self.servers = list(servers if servers is not None else settings.STUN_SERVERS)
        self.request_timeout = request_timeout
        self._transports: List[asyncio.DatagramTransport] = []
        self._tasks: List[asyncio.Task] = []
        self._seen: Set[str] = set()

    @property
    def supported(self) -> bool:
        if not self.servers:
            return False
        try:
            socket.socket(socket.AF_INET, socket.SOCK_DGRAM).close()
        except OSError:
            return False
        return True

    async def _emit(self, queue: asyncio.Queue, line: str, key: str) -> None:
        if key in self._seen:
            return
        self._seen.add(key)
        await queue.put(line)

    async def _await_response(self, protocol: _StunProtocol, transaction_id: bytes) -> Address:
        while True:
            data = await protocol.queue.get()
            mapped = parse_binding_response(data, transaction_id)
            if mapped:
                return mapped

    async def _probe(self, index: int, server: str, queue: asyncio.Queue) -> None:
        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                _StunProtocol, remote_addr=_split_server(server), family=socket.AF_INET
            )
        except (OSError, ValueError) as e:
            logger.debug(f"STUN 服务器 {server} 不可用: {e}")
            return
        self._transports.append(transport)

        local = transport.get_extra_info("sockname")
        if local and local[0] != "0.0.0.0":
            host_line = format_candidate(index * 2 + 1, local[:2], "host", HOST_PRIORITY)
            await self._emit(queue, host_line, f"host:{local[0]}")

        transaction_id = os.urandom(12)
        transport.sendto(build_binding_request(transaction_id))
        try:
            mapped = await asyncio.wait_for(self._await_response(protocol, transaction_id), self.request_timeout)
        except asyncio.TimeoutError:
            logger.debug(f"STUN 服务器 {server} 响应超时")
            return
        srflx_line = format_candidate(index * 2 + 2, mapped, "srflx", SRFLX_PRIORITY, related=local[:2] if local else None)
        await self._emit(queue, srflx_line, f"srflx:{mapped[0]}")

    async def _run_probe(self, index: int, server: str, queue: asyncio.Queue) -> None:
        try:
            await self._probe(index, server, queue)
        finally:
            queue.put_nowait(None)

    async def candidates(self) -> AsyncIterator[str]:
        queue: asyncio.Queue = asyncio.Queue()
        self._tasks = [
            asyncio.create_task(self._run_probe(i, server, queue)) for i, server in enumerate(self.servers)
        ]
        pending = len(self._tasks)
        while pending:
            item = await queue.get()
            if item is None:
                pending -= 1
                continue
            yield item

    async def close(self) -> None:
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        for transport in self._transports:
            transport.close()
        self._transports = []
