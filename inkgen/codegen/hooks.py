"""
 * Copyright(c) 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

from string import Template

from .surface import ContractSurface
from .typescript import SurfaceNames, TypeScriptEmitter


_hooks_template = Template('''\
import { useCallback, useEffect, useState } from "react";
import type {
  $contract,
  $queries,
  $transactions,
  TransactionHandle,
  TransactionReceipt,
} from "./$module";

type QueryResult<K extends keyof $queries> = Awaited<ReturnType<$queries[K]>>;

/** Runs a read-only message whenever the contract or the arguments change. */
export function use${contract}Query<K extends keyof $queries>(
  contract: $contract | null | undefined,
  method: K,
  ...args: Parameters<$queries[K]>
) {
  const [data, setData] = useState<QueryResult<K>>();
  const [error, setError] = useState<Error>();
  const [loading, setLoading] = useState(false);
  const key = JSON.stringify(args, (_, v) => (typeof v === "bigint" ? v.toString() : v));

  const refetch = useCallback(async () => {
    if (!contract) return;
    setLoading(true);
    try {
      const query = contract.query[method] as unknown as (
        ...a: Parameters<$queries[K]>
      ) => Promise<QueryResult<K>>;
      setData(await query(...args));
      setError(undefined);
    } catch (e) {
      setError(e as Error);
    } finally {
      setLoading(false);
    }
    // eslint-disable-next-line react-hooks/exhaustive-deps
  }, [contract, method, key]);

  useEffect(() => {
    void refetch();
  }, [refetch]);

  return { data, error, loading, refetch };
}

/** Submits a state-mutating message and tracks it until it is finalized. */
export function use${contract}Transaction<K extends keyof $transactions>(
  contract: $contract | null | undefined,
  method: K
) {
  const [handle, setHandle] = useState<TransactionHandle>();
  const [receipt, setReceipt] = useState<TransactionReceipt>();
  const [error, setError] = useState<Error>();
  const [pending, setPending] = useState(false);

  const send = useCallback(
    async (...args: Parameters<$transactions[K]>) => {
      if (!contract) throw new Error("Contract $contract is not connected");
      setPending(true);
      setError(undefined);
      try {
        const tx = contract.tx[method] as unknown as (
          ...a: Parameters<$transactions[K]>
        ) => Promise<TransactionHandle>;
        const submitted = await tx(...args);
        setHandle(submitted);
        const result = await submitted.wait();
        setReceipt(result);
        return result;
      } catch (e) {
        setError(e as Error);
        throw e;
      } finally {
        setPending(false);
      }
    },
    [contract, method]
  );

  return { send, handle, receipt, error, pending };
}
''')


def hooks_filename(names: SurfaceNames) -> str:
    return f"use{names.contract}.ts"


def render_hooks(surface: ContractSurface, names: SurfaceNames, module: str) -> str:
    """React hooks typed against the generated module ``module`` (file name without extension)."""
    return TypeScriptEmitter.header(surface) + "\n" + _hooks_template.substitute(
        contract=names.contract,
        queries=names.queries,
        transactions=names.transactions,
        module=module,
    )
