import argparse
import json
import logging
import sys

import configs
import tools
from bpool import BPool, Response
from exceptions import ShuttingDown
from startup import setup

log = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _add_token_params_args(parser: argparse.ArgumentParser):
    parser.add_argument('token', help='Token address')
    parser.add_argument('balance', type=int, help='Token balance, in wei')
    parser.add_argument('weight', type=int, help='Token denormalized weight')


def _add_swap_args(parser: argparse.ArgumentParser, *names: str):
    parser.add_argument('token_in', help='Input token address')
    parser.add_argument(names[0], type=int)
    parser.add_argument('token_out', help='Output token address')
    parser.add_argument(names[1], type=int)
    parser.add_argument(names[2], type=int)
    parser.add_argument('--approve', action='store_true', help='Approve input amount before swap')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bpool',
        description='Read and manage a deployed BPool contract',
    )
    parser.add_argument('pool', help='Pool contract address')
    parser.add_argument('--rpc', default=configs.RPC_URI, help='Node endpoint (http, ws or ipc)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('params', help='Fee, manager, number of tokens and paused state')

    spot_price = subparsers.add_parser('spot-price', help='Spot price between two tokens')
    spot_price.add_argument('token_in')
    spot_price.add_argument('token_out')

    subparsers.add_parser('call-logs', help='Decoded LOG_CALL history')
    subparsers.add_parser('token-params', help='Bound tokens with balances and weights')

    _add_token_params_args(subparsers.add_parser('bind', help='Approve and bind token'))
    _add_token_params_args(
        subparsers.add_parser('set-params', help='Approve and update token balance and weight'))

    _add_swap_args(
        subparsers.add_parser('swap-in', help='swap_ExactAmountIn'),
        'amount_in', 'min_amount_out', 'max_price',
    )
    _add_swap_args(
        subparsers.add_parser('swap-out', help='swap_ExactAmountOut'),
        'max_amount_in', 'amount_out', 'max_price',
    )
    _add_swap_args(
        subparsers.add_parser('swap-price', help='swap_ExactMarginalPrice'),
        'max_amount_in', 'max_amount_out', 'marginal_price',
    )
    return parser


def run_command(pool: BPool, args: argparse.Namespace) -> Response:
    if args.command == 'params':
        return pool.get_params()
    if args.command == 'spot-price':
        return pool.get_spot_price(args.token_in, args.token_out)
    if args.command == 'call-logs':
        return pool.get_call_logs()
    if args.command == 'token-params':
        return pool.get_token_params()
    if args.command == 'bind':
        return pool.bind_token(args.token, args.balance, args.weight)
    if args.command == 'set-params':
        return pool.set_token_params(args.token, args.balance, args.weight)
    if args.command == 'swap-in':
        return pool.swap_exact_amount_in(
            args.token_in, args.amount_in, args.token_out, args.min_amount_out, args.max_price,
            approve=args.approve,
        )
    if args.command == 'swap-out':
        return pool.swap_exact_amount_out(
            args.token_in, args.max_amount_in, args.token_out, args.amount_out, args.max_price,
            approve=args.approve,
        )
    if args.command == 'swap-price':
        return pool.swap_exact_marginal_price(
            args.token_in, args.max_amount_in, args.token_out, args.max_amount_out,
            args.marginal_price, approve=args.approve,
        )
    raise ValueError(f'Unknown command {args.command!r}')


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)
    web3 = tools.w3.get_web3(args.rpc, verbose=True)
    pool = BPool(args.pool, web3)
    log.info(f'Running {args.command} on {pool}')

    try:
        response = run_command(pool, args)
    except ShuttingDown as e:
        log.warning(f'Interrupted: {e}')
        return EXIT_INTERRUPTED
    finally:
        if configs.CACHE_STATS:
            log.info(f'Cache stats: {tools.cache.get_stats()}')

    print(json.dumps(response.to_dict(), indent=2, default=str))
    return 0 if response.ok else 1


if __name__ == '__main__':
    setup()
    sys.exit(main())
