"""
Binance CLI Commands

바이낸스 REST 클라이언트를 위한 CLI 명령어 인터페이스
"""

import json
import sys

import click
from loguru import logger

from ..core.exceptions import BinanceRestException
from ..core.types import OrderSide, OrderType
from ..trading.binance_client import BinanceClient
from ..utils.config_loader import ConfigLoader
from ..utils.constants import DEFAULT_LOG_RETENTION, DEFAULT_LOG_ROTATION
from ..utils.logging_setup import setup_logging


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _run(ctx: click.Context, func, *args, **kwargs):
    """클라이언트 메서드 실행 후 결과를 JSON으로 출력"""
    client = None
    try:
        client = ctx.obj['client_factory']()
        _echo_json(func(client, *args, **kwargs))
    except BinanceRestException as e:
        click.echo(f"❌ {e.message}", err=True)
        sys.exit(1)
    finally:
        if client is not None:
            client.close()


@click.group()
@click.option('--config', 'config_path',
              type=click.Path(exists=True, dir_okay=False),
              help='YAML 설정 파일 경로')
@click.option('--verbose', is_flag=True, help='상세 로그 출력')
@click.pass_context
def binance(ctx: click.Context, config_path: str, verbose: bool):
    """바이낸스 REST API 명령어들"""
    loader = ConfigLoader(config_path) if config_path else None
    log_config = loader.get_logging_config() if loader else {}

    setup_logging(
        level="DEBUG" if verbose else log_config.get("level", "WARNING"),
        log_file=log_config.get("file_path"),
        rotation=log_config.get("rotation", DEFAULT_LOG_ROTATION),
        retention=log_config.get("retention", DEFAULT_LOG_RETENTION)
    )

    def client_factory() -> BinanceClient:
        if loader:
            logger.debug(f"설정 파일 사용: {config_path}")
            return BinanceClient.from_config(loader)
        return BinanceClient()

    ctx.ensure_object(dict)
    ctx.obj.setdefault('client_factory', client_factory)


@binance.command()
@click.pass_context
def ping(ctx):
    """API 연결 확인"""
    _run(ctx, lambda client: client.ping())


@binance.command(name='time')
@click.pass_context
def server_time(ctx):
    """서버 시각 및 로컬 시계 차이 조회"""
    def _server_time(client: BinanceClient):
        offset = client.sync_clock()
        return {'offset_ms': offset, 'synced': client.is_synced}

    _run(ctx, _server_time)


@binance.command()
@click.argument('symbol')
@click.pass_context
def price(ctx, symbol: str):
    """최신 가격 조회"""
    _run(ctx, lambda client: client.get_price(symbol.upper()))


@binance.command()
@click.argument('symbol')
@click.pass_context
def ticker(ctx, symbol: str):
    """24시간 시세 통계 조회"""
    _run(ctx, lambda client: client.get_ticker(symbol.upper()))


@binance.command()
@click.argument('symbol')
@click.argument('interval')
@click.option('--limit', type=int, default=500, help='최대 캔들 개수 (기본값: 500)')
@click.pass_context
def klines(ctx, symbol: str, interval: str, limit: int):
    """캔들 데이터 조회"""
    _run(ctx, lambda client: client.get_klines(symbol.upper(), interval, limit))


@binance.command()
@click.pass_context
def balances(ctx):
    """계정 잔고 조회 (API 키 필요)"""
    _run(ctx, lambda client: client.get_balances())


@binance.command()
@click.argument('symbol')
@click.argument('side', type=click.Choice([s.value for s in OrderSide], case_sensitive=False))
@click.argument('quantity')
@click.option('--type', 'order_type',
              type=click.Choice([t.value for t in OrderType], case_sensitive=False),
              default=OrderType.MARKET.value,
              help='주문 유형 (기본값: MARKET)')
@click.option('--price', default=None, help='지정가')
@click.option('--test/--live', default=True, help='테스트 주문 여부 (기본값: 테스트)')
@click.pass_context
def order(ctx, symbol: str, side: str, quantity: str, order_type: str,
          price: str, test: bool):
    """주문 실행 (기본값은 v3/order/test 검증 주문)"""
    _run(ctx, lambda client: client.trade(symbol.upper(), quantity, side, order_type, price, test))


def main():
    binance(obj={})


if __name__ == '__main__':
    main()
