from __future__ import annotations

SIMULATOR_SOURCE = """\
import { HttpError } from "@nestia/fetcher";
import typia from "typia";

export namespace NestiaSimulator {
  export interface IProps {
    host: string;
    path: string;
    method: "GET" | "POST" | "PUT" | "PATCH" | "DELETE" | "HEAD";
    contentType: string;
  }

  export const assert = (props: IProps) => {
    return {
      param: param(props),
      query: query(props),
      body: body(props),
      headers: headers(props),
    };
  };

  const param =
    (props: IProps) =>
    (name: string) =>
    (task: () => any): void => {
      validate(
        (exp) => `URL parameter "${name}" is not ${exp.expected} type.`,
      )(props)(task);
    };

  const query =
    (props: IProps) =>
    (task: () => any): void =>
      validate(
        () => "Request query parameters are not following the promised type.",
      )(props)(task);

  const body =
    (props: IProps) =>
    (task: () => any): void =>
      validate(() => "Request body is not following the promised type.")(
        props,
      )(task);

  const headers =
    (props: IProps) =>
    (task: () => any): void =>
      validate(() => "Request headers are not following the promised type.")(
        props,
      )(task);

  const validate =
    (message: (exp: typia.TypeGuardError) => string, path?: string) =>
    (props: IProps) =>
    (task: () => any): void => {
      try {
        task();
      } catch (exp) {
        if (typia.is<HttpError>(exp)) throw exp;
        else if (exp instanceof typia.TypeGuardError)
          throw new HttpError(
            props.method,
            props.host + props.path,
            400,
            {
              "Content-Type": props.contentType,
            },
            JSON.stringify({
              method: exp.method,
              path: path ?? exp.path,
              expected: exp.expected,
              value: exp.value,
              message: message(exp),
            }),
          );
        throw exp;
      }
    };
}
"""
